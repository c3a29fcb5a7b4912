"""Read-only views over games and the winnings ledger.

These queries run without locks; a listing may be a request behind the
ledger, which only matters for display.
"""
from decimal import Decimal

from flask import current_app
from sqlalchemy import func, or_

from app import db
from app.errors import NotFoundError
from app.models import Game, GameStatus, Guess, GuessStatus, Hint, HintStatus, User
from .pricing import to_money


def list_games_for_user(user_id: int) -> dict:
    games = (
        Game.query
        .filter(or_(Game.creator_id == user_id, Game.guesser_id == user_id))
        .order_by(Game.created_at.desc(), Game.id.desc())
        .all()
    )
    return {
        'created': [g.to_dict(viewer_id=user_id) for g in games if g.creator_id == user_id],
        'guessing': [g.to_dict(viewer_id=user_id) for g in games if g.guesser_id == user_id],
    }


def list_open_games(user_id: int) -> list:
    games = (
        Game.query
        .filter(Game.status == GameStatus.ACTIVE,
                Game.guesser_id.is_(None),
                Game.creator_id != user_id)
        .order_by(Game.created_at.desc(), Game.id.desc())
        .all()
    )
    return [g.to_dict(viewer_id=user_id) for g in games]


def pending_counts(user_id: int) -> dict:
    """Badge counts: responses the user owes, and games waiting on their move."""
    awaiting_guesses = (
        Guess.query.join(Game, Guess.game_id == Game.id)
        .filter(Game.creator_id == user_id,
                Game.status == GameStatus.ACTIVE,
                Guess.status == GuessStatus.PENDING)
        .count()
    )
    awaiting_hints = (
        Hint.query.join(Game, Hint.game_id == Game.id)
        .filter(Game.creator_id == user_id,
                Game.status == GameStatus.ACTIVE,
                Hint.status == HintStatus.PENDING)
        .count()
    )
    guessing = Game.query.filter_by(guesser_id=user_id, status=GameStatus.ACTIVE).all()
    your_turn = sum(1 for g in guessing if g.pending_action() is None)
    awaiting = awaiting_guesses + awaiting_hints
    return {
        'awaiting_response': awaiting,
        'your_turn': your_turn,
        'total': awaiting + your_turn,
    }


def _effort(game: Game) -> int:
    return game.guesses.count() + game.hints.count()


def _summary(game: Game) -> dict:
    return {
        'id': game.id,
        'song_title': game.song_title,
        'artist': game.artist,
        'current_prize': float(to_money(game.current_prize)),
        'guess_count': game.guesses.count(),
        'hint_count': game.hints.count(),
    }


def user_stats(user_id: int) -> dict:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')

    solved = (
        Game.query
        .filter(or_(Game.creator_id == user_id, Game.guesser_id == user_id),
                Game.status == GameStatus.SOLVED)
        .all()
    )
    games_played = len(solved)
    games_won = sum(1 for g in solved if g.guesser_id == user_id)
    win_rate = round(games_won / games_played * 100, 1) if games_played else 0.0
    average_guesses = (
        round(sum(g.guesses.count() for g in solved) / games_played, 1) if games_played else 0.0
    )

    hardest = sorted(solved, key=lambda g: (-_effort(g), g.id))[:5]
    timed = [g for g in solved if g.solved_at and g.created_at]
    longest = sorted(timed, key=lambda g: (g.created_at - g.solved_at, g.id))[:5]

    longest_games = []
    for g in longest:
        entry = _summary(g)
        entry['seconds_to_solve'] = int((g.solved_at - g.created_at).total_seconds())
        longest_games.append(entry)

    return {
        'user': user.to_dict(),
        'stats': {
            'games_played': games_played,
            'games_won': games_won,
            'win_rate': win_rate,
            'average_guesses': average_guesses,
            'hardest_games': [_summary(g) for g in hardest],
            'longest_games': longest_games,
        },
    }


def pint_progress() -> dict:
    goal = to_money(current_app.config['PINT_GOAL'])
    total = to_money(db.session.query(func.coalesce(func.sum(User.total_winnings), 0)).scalar())
    if goal > 0:
        progress = min(total / goal * 100, Decimal(100))
    else:
        progress = Decimal(100)
    remaining = max(goal - total, Decimal('0.00'))
    return {
        'total_winnings': float(total),
        'pint_goal': float(goal),
        'progress': float(progress.quantize(Decimal('0.1'))),
        'remaining': float(remaining.quantize(Decimal('0.01'))),
        'pint_earned': total >= goal,
    }
