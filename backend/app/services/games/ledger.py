"""Game lifecycle and prize ledger.

Every mutating operation here is one unit of work: the game row is loaded
with ``SELECT ... FOR UPDATE``, the turn and status rules are checked, the
game and its guess/hint rows are changed, and the session is committed.
Any failure rolls the whole unit back, so a prize is never halved twice by
racing requests and a ledger credit never lands without the solve that
caused it.
"""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.errors import (
    AuthorizationError,
    ConflictError,
    GameError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.models import Game, GameStatus, Guess, GuessStatus, Hint, HintStatus, User, utcnow
from .pricing import price_guess, price_hint, to_money


@contextmanager
def _transaction(action: str):
    try:
        yield
        db.session.commit()
    except GameError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"[{action}] persistence failure")
        raise InternalError(f"Failed to {action.replace('_', ' ')}") from exc


def _required_text(value, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{label} is required')
    return value.strip()


def locked_game_query(game_id: int):
    """Row-locking select used by every mutating operation."""
    return Game.query.filter_by(id=game_id).with_for_update()


def _lock_game(game_id: int) -> Game:
    game = locked_game_query(game_id).first()
    if game is None:
        raise NotFoundError('Game not found')
    return game


def _require_creator(game: Game, actor_id: int, action: str) -> None:
    if game.creator_id != actor_id:
        raise AuthorizationError(f'Only the creator can {action}')


def _require_active(game: Game) -> None:
    if game.status is not GameStatus.ACTIVE:
        raise ConflictError('Game is not active')


def _require_guesser(game: Game, actor_id: int) -> None:
    if actor_id == game.creator_id:
        raise AuthorizationError('You cannot guess your own song')
    if game.guesser_id is not None and game.guesser_id != actor_id:
        raise AuthorizationError('Another player is already guessing this game')


def _require_nothing_pending(game: Game) -> None:
    pending = game.pending_action()
    if pending is not None:
        raise ConflictError(f'Waiting for the creator to answer the pending {pending}')


def _claim_guesser(game: Game, actor_id: int) -> None:
    if game.guesser_id is None:
        game.guesser_id = actor_id
        current_app.logger.info(f"[bind] game={game.id} guesser={actor_id}")


def _solve(game: Game) -> None:
    game.status = game.status.require(GameStatus.SOLVED, 'Game')
    game.solved_at = utcnow()
    prize = to_money(game.current_prize)
    if game.guesser_id is None:
        current_app.logger.info(f"[solve] game={game.id} no guesser, prize={prize} unclaimed")
        return
    # Increment in SQL so concurrent solves for the same guesser both land
    User.query.filter_by(id=game.guesser_id).update(
        {User.total_winnings: User.total_winnings + prize},
        synchronize_session=False,
    )
    current_app.logger.info(f"[solve] game={game.id} guesser={game.guesser_id} credited={prize}")


def create_game(creator_id: int, song_title, artist, opponent_email=None, notes=None) -> Game:
    song_title = _required_text(song_title, 'Song title')
    artist = _required_text(artist, 'Artist')
    if notes is not None and not isinstance(notes, str):
        raise ValidationError('Notes must be text')
    with _transaction('create_game'):
        guesser_id = None
        if opponent_email:
            if not isinstance(opponent_email, str):
                raise ValidationError('Opponent email must be text')
            opponent = User.query.filter_by(email=opponent_email.strip().lower()).first()
            if opponent is None:
                raise ValidationError('Opponent email not found. They need to register first!')
            if opponent.id == creator_id:
                raise ValidationError('You cannot create a game with yourself!')
            guesser_id = opponent.id
        prize = to_money(current_app.config['GAME_STARTING_PRIZE'])
        game = Game(
            creator_id=creator_id,
            guesser_id=guesser_id,
            song_title=song_title,
            artist=artist,
            starting_prize=prize,
            current_prize=prize,
            status=GameStatus.ACTIVE,
            notes=notes or '',
        )
        db.session.add(game)
        db.session.flush()
        current_app.logger.info(f"[create] game={game.id} creator={creator_id} guesser={guesser_id} prize={prize}")
    return game


def submit_guess(game_id: int, actor_id: int, guess_text) -> Guess:
    guess_text = _required_text(guess_text, 'Guess text')
    with _transaction('submit_guess'):
        game = _lock_game(game_id)
        _require_guesser(game, actor_id)
        _require_active(game)
        _require_nothing_pending(game)
        _claim_guesser(game, actor_id)

        prize_before = to_money(game.current_prize)
        prize_after = price_guess(prize_before, game.guesses.count())
        guess = Guess(
            game_id=game.id,
            user_id=actor_id,
            guess_text=guess_text,
            prize_before=prize_before,
            prize_after=prize_after,
            status=GuessStatus.PENDING,
        )
        game.current_prize = prize_after
        db.session.add(guess)
        db.session.flush()
        current_app.logger.info(f"[guess] game={game.id} guess={guess.id} prize {prize_before} -> {prize_after}")
    return guess


def respond_to_guess(game_id: int, guess_id: int, actor_id: int, correct: bool, feedback=None) -> Game:
    if not isinstance(correct, bool):
        raise ValidationError('correct must be true or false')
    with _transaction('respond_to_guess'):
        game = _lock_game(game_id)
        _require_creator(game, actor_id, 'respond to guesses')
        guess = Guess.query.filter_by(id=guess_id, game_id=game.id).first()
        if guess is None:
            raise NotFoundError('Guess not found')
        _require_active(game)
        outcome = GuessStatus.CORRECT if correct else GuessStatus.INCORRECT
        guess.status = guess.status.require(outcome, 'Guess')
        guess.feedback = feedback.strip() if isinstance(feedback, str) and feedback.strip() else None
        guess.responded_at = utcnow()
        current_app.logger.info(f"[respond-guess] game={game.id} guess={guess.id} status={outcome.value}")
        if correct:
            _solve(game)
    return game


def request_hint(game_id: int, actor_id: int, hint_request) -> Hint:
    hint_request = _required_text(hint_request, 'Hint request')
    with _transaction('request_hint'):
        game = _lock_game(game_id)
        _require_guesser(game, actor_id)
        _require_active(game)
        _require_nothing_pending(game)
        _claim_guesser(game, actor_id)

        prize_before = to_money(game.current_prize)
        prize_after = price_hint(prize_before)
        hint = Hint(
            game_id=game.id,
            hint_request=hint_request,
            prize_before=prize_before,
            prize_after=prize_after,
            status=HintStatus.PENDING,
        )
        game.current_prize = prize_after
        db.session.add(hint)
        db.session.flush()
        current_app.logger.info(f"[hint] game={game.id} hint={hint.id} prize {prize_before} -> {prize_after}")
    return hint


def respond_to_hint(game_id: int, hint_id: int, actor_id: int, response) -> Game:
    response = _required_text(response, 'Hint response')
    with _transaction('respond_to_hint'):
        game = _lock_game(game_id)
        _require_creator(game, actor_id, 'answer hints')
        hint = Hint.query.filter_by(id=hint_id, game_id=game.id).first()
        if hint is None:
            raise NotFoundError('Hint not found')
        _require_active(game)
        hint.status = hint.status.require(HintStatus.ANSWERED, 'Hint')
        hint.hint_response = response
        hint.responded_at = utcnow()
        current_app.logger.info(f"[respond-hint] game={game.id} hint={hint.id}")
    return game


def solve_game(game_id: int, actor_id: int) -> Game:
    with _transaction('solve_game'):
        game = _lock_game(game_id)
        _require_creator(game, actor_id, 'mark the game as solved')
        _require_active(game)
        _solve(game)
    return game


def update_notes(game_id: int, actor_id: int, notes) -> Game:
    if notes is not None and not isinstance(notes, str):
        raise ValidationError('Notes must be text')
    with _transaction('update_notes'):
        game = _lock_game(game_id)
        if actor_id not in (game.creator_id, game.guesser_id):
            raise AuthorizationError('Not authorized to edit this game')
        game.notes = notes or ''
    return game


def delete_game(game_id: int, actor_id: int) -> None:
    with _transaction('delete_game'):
        game = _lock_game(game_id)
        _require_creator(game, actor_id, 'delete the game')
        db.session.delete(game)
        current_app.logger.info(f"[delete] game={game_id} by={actor_id}")
