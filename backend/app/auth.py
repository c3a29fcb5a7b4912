from flask import current_app, jsonify
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app import db, login_manager

TOKEN_SALT = 'earworm-auth-token'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user) -> str:
    return _serializer().dumps({'user_id': user.id})


def user_for_token(token: str):
    """Resolve a bearer token to a User, or None if it is forged or expired."""
    from app.models import User

    max_age = int(current_app.config.get('AUTH_TOKEN_MAX_AGE_SEC', 7 * 24 * 3600))
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info("[auth] expired token rejected")
        return None
    except BadSignature:
        current_app.logger.warning("[auth] invalid token rejected")
        return None
    return db.session.get(User, int(payload.get('user_id', 0)))


def init_auth():
    @login_manager.user_loader
    def load_user(user_id):
        from app.models import User
        return db.session.get(User, int(user_id))

    @login_manager.request_loader
    def load_user_from_request(req):
        header = req.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            return None
        return user_for_token(token.strip())

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401
