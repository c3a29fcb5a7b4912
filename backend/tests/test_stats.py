from decimal import Decimal

import pytest

from app import db
from app.errors import NotFoundError
from app.models import User
from app.services.games import ledger
from app.services.games import stats


def _set_winnings(user_id, amount):
    db.session.get(User, user_id).total_winnings = Decimal(amount)
    db.session.commit()


def test_pint_progress_with_no_winnings(accounts):
    assert stats.pint_progress() == {
        'total_winnings': 0.0,
        'pint_goal': 7.5,
        'progress': 0.0,
        'remaining': 7.5,
        'pint_earned': False,
    }


def test_pint_progress_goal_reached_exactly(accounts):
    _set_winnings(accounts['alice'], '5.00')
    _set_winnings(accounts['bob'], '2.50')
    progress = stats.pint_progress()
    assert progress['total_winnings'] == 7.5
    assert progress['progress'] == 100.0
    assert progress['remaining'] == 0.0
    assert progress['pint_earned'] is True


def test_pint_progress_partial_and_capped(accounts):
    _set_winnings(accounts['cara'], '3.75')
    progress = stats.pint_progress()
    assert progress['progress'] == 50.0
    assert progress['remaining'] == 3.75
    assert progress['pint_earned'] is False

    _set_winnings(accounts['cara'], '20.00')
    progress = stats.pint_progress()
    assert progress['progress'] == 100.0
    assert progress['remaining'] == 0.0
    assert progress['pint_earned'] is True


def test_pint_progress_follows_solves(accounts):
    gid = ledger.create_game(accounts['alice'], 'Song', 'Artist', opponent_email='bob@example.com').id
    ledger.request_hint(gid, accounts['bob'], 'Hint?')  # 25.00
    ledger.solve_game(gid, accounts['alice'])
    progress = stats.pint_progress()
    assert progress['total_winnings'] == 25.0
    assert progress['pint_earned'] is True


def test_user_stats(accounts):
    alice, bob = accounts['alice'], accounts['bob']

    easy = ledger.create_game(alice, 'Easy', 'Artist', opponent_email='bob@example.com').id
    guess = ledger.submit_guess(easy, bob, 'Easy')
    ledger.respond_to_guess(easy, guess.id, alice, True)

    hard = ledger.create_game(alice, 'Hard', 'Artist', opponent_email='bob@example.com').id
    for text in ('One', 'Two'):
        guess = ledger.submit_guess(hard, bob, text)
        ledger.respond_to_guess(hard, guess.id, alice, False)
    hint = ledger.request_hint(hard, bob, 'Hint?')
    ledger.respond_to_hint(hard, hint.id, alice, 'Answer')
    ledger.solve_game(hard, alice)

    # still running, so it does not count
    ledger.create_game(alice, 'Open', 'Artist', opponent_email='bob@example.com')

    result = stats.user_stats(bob)
    assert result['user']['display_name'] == 'Bob'
    assert result['user']['total_winnings'] == 62.5
    bob_stats = result['stats']
    assert bob_stats['games_played'] == 2
    assert bob_stats['games_won'] == 2
    assert bob_stats['win_rate'] == 100.0
    assert bob_stats['average_guesses'] == 1.5
    assert [g['song_title'] for g in bob_stats['hardest_games']] == ['Hard', 'Easy']
    assert bob_stats['hardest_games'][0]['guess_count'] == 2
    assert bob_stats['hardest_games'][0]['hint_count'] == 1
    assert len(bob_stats['longest_games']) == 2

    alice_stats = stats.user_stats(alice)['stats']
    assert alice_stats['games_played'] == 2
    assert alice_stats['games_won'] == 0
    assert alice_stats['win_rate'] == 0.0


def test_user_stats_unknown_user(accounts):
    with pytest.raises(NotFoundError):
        stats.user_stats(12345)


def test_stats_endpoints(client, players):
    headers = players['alice']['headers']
    res = client.get('/api/stats/pint-progress', headers=headers)
    assert res.status_code == 200
    assert res.get_json()['pint_goal'] == 7.5

    res = client.get(f"/api/stats/user/{players['bob']['id']}", headers=headers)
    assert res.status_code == 200
    assert res.get_json()['stats']['games_played'] == 0

    assert client.get('/api/stats/user/999', headers=headers).status_code == 404
    assert client.get('/api/stats/pint-progress').status_code == 401
