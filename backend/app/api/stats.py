from flask import Blueprint, jsonify
from flask_login import login_required
from app.services.games import stats as svc_stats


stats = Blueprint('stats', __name__)


@stats.route('/pint-progress', methods=['GET'])
@login_required
def get_pint_progress():
    return jsonify(svc_stats.pint_progress())


@stats.route('/user/<int:user_id>', methods=['GET'])
@login_required
def get_user_stats(user_id):
    return jsonify(svc_stats.user_stats(user_id))
