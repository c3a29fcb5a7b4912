from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from app import db
from app.auth import issue_token
from app.errors import ValidationError
from app.models import User

main = Blueprint('main', __name__)

def _payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _text_field(data, key):
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f'{key} must be text')
    return value

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'message': 'Earworm Royale API is running!'})

@main.route('/auth/register', methods=['POST'])
def register():
    data = _payload()
    email = _text_field(data, 'email').strip().lower()
    password = _text_field(data, 'password')
    display_name = _text_field(data, 'display_name').strip()
    if not all([email, password, display_name]):
        raise ValidationError('Email, password and display name are required')

    if User.query.filter_by(email=email).first():
        raise ValidationError('Email already registered')

    user = User(email=email, display_name=display_name)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[register] user={user.id}")

    return jsonify({'token': issue_token(user), 'user': user.to_dict(include_email=True)}), 201

@main.route('/auth/login', methods=['POST'])
def login():
    data = _payload()
    email = _text_field(data, 'email').strip().lower()
    password = _text_field(data, 'password')
    if not email or not password:
        raise ValidationError('Email and password required')

    user = User.query.filter_by(email=email).first()
    if user and user.check_password(password):
        return jsonify({'token': issue_token(user), 'user': user.to_dict(include_email=True)})
    return jsonify({'error': 'Invalid credentials'}), 401

@main.route('/auth/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict(include_email=True)})
