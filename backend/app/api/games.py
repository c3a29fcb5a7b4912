from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app import db
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models import Game
from app.services.games import ledger
from app.services.games import stats as svc_stats


games = Blueprint('games', __name__)


@games.before_request
@login_required
def require_login():
    # Every game route acts on behalf of the bearer
    return None


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _game_json(game_id: int):
    game = db.session.get(Game, game_id)
    if game is None:
        raise NotFoundError('Game not found')
    return jsonify(game.to_dict(viewer_id=current_user.id, include_children=True))


@games.route('', methods=['POST'])
def create_game():
    data = _payload()
    game = ledger.create_game(
        current_user.id,
        data.get('song_title'),
        data.get('artist'),
        opponent_email=data.get('opponent_email'),
        notes=data.get('notes'),
    )
    payload = game.to_dict(viewer_id=current_user.id, include_children=True)
    payload['opponent_assigned'] = game.guesser_id is not None
    return jsonify(payload), 201


@games.route('', methods=['GET'])
def list_my_games():
    return jsonify(svc_stats.list_games_for_user(current_user.id))


@games.route('/open', methods=['GET'])
def list_open_games():
    return jsonify(svc_stats.list_open_games(current_user.id))


@games.route('/pending-counts', methods=['GET'])
def get_pending_counts():
    return jsonify(svc_stats.pending_counts(current_user.id))


@games.route('/<int:game_id>', methods=['GET'])
def get_game(game_id):
    game = db.session.get(Game, game_id)
    if game is None:
        raise NotFoundError('Game not found')
    if not game.visible_to(current_user.id):
        raise AuthorizationError('Not authorized to view this game')
    return jsonify(game.to_dict(viewer_id=current_user.id, include_children=True))


@games.route('/<int:game_id>/guess', methods=['POST'])
def submit_guess(game_id):
    ledger.submit_guess(game_id, current_user.id, _payload().get('guess_text'))
    return _game_json(game_id)


@games.route('/<int:game_id>/guess/<int:guess_id>/respond', methods=['POST'])
def respond_to_guess(game_id, guess_id):
    data = _payload()
    correct = data.get('correct')
    if correct is None and data.get('status') in ('correct', 'incorrect'):
        correct = data['status'] == 'correct'
    if not isinstance(correct, bool):
        raise ValidationError('Response must say whether the guess is correct')
    ledger.respond_to_guess(game_id, guess_id, current_user.id, correct, feedback=data.get('feedback'))
    return _game_json(game_id)


@games.route('/<int:game_id>/hint', methods=['POST'])
def request_hint(game_id):
    ledger.request_hint(game_id, current_user.id, _payload().get('hint_request'))
    return _game_json(game_id)


@games.route('/<int:game_id>/hint/<int:hint_id>/respond', methods=['POST'])
def respond_to_hint(game_id, hint_id):
    ledger.respond_to_hint(game_id, hint_id, current_user.id, _payload().get('hint_response'))
    return _game_json(game_id)


@games.route('/<int:game_id>/solve', methods=['POST'])
def solve_game(game_id):
    ledger.solve_game(game_id, current_user.id)
    return _game_json(game_id)


@games.route('/<int:game_id>/notes', methods=['PATCH'])
def update_notes(game_id):
    ledger.update_notes(game_id, current_user.id, _payload().get('notes'))
    return _game_json(game_id)


@games.route('/<int:game_id>', methods=['DELETE'])
def delete_game(game_id):
    ledger.delete_game(game_id, current_user.id)
    return jsonify({'message': 'Game deleted', 'id': game_id})
