from app import db, bcrypt
from app.errors import ConflictError
from flask_login import UserMixin
from datetime import datetime, timezone
from decimal import Decimal
import enum


def utcnow():
    return datetime.now(timezone.utc)


def _money(value):
    """Serialize a Numeric column for JSON (two decimal places)."""
    if value is None:
        return None
    return float(Decimal(value).quantize(Decimal('0.01')))


def _iso(value):
    return value.isoformat() if value else None


class _Transitions:
    """Mixin for status enums: each member lists the states it may move to."""

    def can_become(self, target):
        return target in type(self)._transitions()[self]

    def require(self, target, what):
        if not self.can_become(target):
            raise ConflictError(f'{what} is already {self.value} and cannot become {target.value}')
        return target


class GameStatus(_Transitions, enum.Enum):
    ACTIVE = 'active'
    SOLVED = 'solved'

    @classmethod
    def _transitions(cls):
        return {
            cls.ACTIVE: {cls.SOLVED},
            cls.SOLVED: set(),
        }


class GuessStatus(_Transitions, enum.Enum):
    PENDING = 'pending'
    CORRECT = 'correct'
    INCORRECT = 'incorrect'

    @classmethod
    def _transitions(cls):
        return {
            cls.PENDING: {cls.CORRECT, cls.INCORRECT},
            cls.CORRECT: set(),
            cls.INCORRECT: set(),
        }


class HintStatus(_Transitions, enum.Enum):
    PENDING = 'pending'
    ANSWERED = 'answered'

    @classmethod
    def _transitions(cls):
        return {
            cls.PENDING: {cls.ANSWERED},
            cls.ANSWERED: set(),
        }


def _status_column(enum_cls, name, default):
    return db.Column(
        db.Enum(enum_cls, name=name, native_enum=False, length=16,
                values_callable=lambda members: [m.value for m in members]),
        nullable=False,
        default=default,
    )


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    display_name = db.Column(db.String(64), nullable=False)
    total_winnings = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self, include_email=False):
        data = {
            'id': self.id,
            'display_name': self.display_name,
            'total_winnings': _money(self.total_winnings),
            'created_at': _iso(self.created_at),
        }
        if include_email:
            data['email'] = self.email
        return data


class Game(db.Model):
    __tablename__ = 'games'
    id = db.Column(db.Integer, primary_key=True)
    creator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    guesser_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    song_title = db.Column(db.String(255), nullable=False)
    artist = db.Column(db.String(255), nullable=False)
    starting_prize = db.Column(db.Numeric(10, 2), nullable=False)
    current_prize = db.Column(db.Numeric(10, 2), nullable=False)
    status = _status_column(GameStatus, 'game_status', GameStatus.ACTIVE)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    solved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    creator = db.relationship('User', foreign_keys=[creator_id])
    guesser = db.relationship('User', foreign_keys=[guesser_id])
    guesses = db.relationship('Guess', back_populates='game', lazy='dynamic',
                              cascade='all, delete-orphan', order_by='Guess.id')
    hints = db.relationship('Hint', back_populates='game', lazy='dynamic',
                            cascade='all, delete-orphan', order_by='Hint.id')

    @property
    def is_active(self):
        return self.status is GameStatus.ACTIVE

    def pending_action(self):
        """Return 'guess' or 'hint' if the creator owes a response, else None."""
        if self.status is not GameStatus.ACTIVE:
            return None
        if self.guesses.filter_by(status=GuessStatus.PENDING).first() is not None:
            return 'guess'
        if self.hints.filter_by(status=HintStatus.PENDING).first() is not None:
            return 'hint'
        return None

    def visible_to(self, user_id):
        if user_id in (self.creator_id, self.guesser_id):
            return True
        # Unclaimed games can be browsed by anyone who might take them on
        return self.guesser_id is None and self.is_active

    def to_dict(self, viewer_id=None, include_children=False):
        # The song stays a mystery to everyone but the creator until solved
        reveal = viewer_id == self.creator_id or self.status is GameStatus.SOLVED
        data = {
            'id': self.id,
            'creator_id': self.creator_id,
            'creator_name': self.creator.display_name if self.creator else None,
            'guesser_id': self.guesser_id,
            'guesser_name': self.guesser.display_name if self.guesser else None,
            'song_title': self.song_title if reveal else None,
            'artist': self.artist if reveal else None,
            'starting_prize': _money(self.starting_prize),
            'current_prize': _money(self.current_prize),
            'status': self.status.value,
            'notes': self.notes or '',
            'created_at': _iso(self.created_at),
            'solved_at': _iso(self.solved_at),
            'guess_count': self.guesses.count(),
            'hint_count': self.hints.count(),
            'pending_action': self.pending_action(),
        }
        if include_children:
            data['guesses'] = [g.to_dict() for g in self.guesses]
            data['hints'] = [h.to_dict() for h in self.hints]
        return data


class Guess(db.Model):
    __tablename__ = 'guesses'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('games.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    guess_text = db.Column(db.Text, nullable=False)
    prize_before = db.Column(db.Numeric(10, 2), nullable=False)
    prize_after = db.Column(db.Numeric(10, 2), nullable=False)
    status = _status_column(GuessStatus, 'guess_status', GuessStatus.PENDING)
    feedback = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    responded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    game = db.relationship('Game', back_populates='guesses')
    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'user_id': self.user_id,
            'user_name': self.user.display_name if self.user else None,
            'guess_text': self.guess_text,
            'prize_before': _money(self.prize_before),
            'prize_after': _money(self.prize_after),
            'status': self.status.value,
            'feedback': self.feedback,
            'created_at': _iso(self.created_at),
            'responded_at': _iso(self.responded_at),
        }


class Hint(db.Model):
    __tablename__ = 'hints'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('games.id'), nullable=False, index=True)
    hint_request = db.Column(db.Text, nullable=False)
    hint_response = db.Column(db.Text, nullable=True)
    prize_before = db.Column(db.Numeric(10, 2), nullable=False)
    prize_after = db.Column(db.Numeric(10, 2), nullable=False)
    status = _status_column(HintStatus, 'hint_status', HintStatus.PENDING)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    responded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    game = db.relationship('Game', back_populates='hints')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'hint_request': self.hint_request,
            'hint_response': self.hint_response,
            'prize_before': _money(self.prize_before),
            'prize_after': _money(self.prize_after),
            'status': self.status.value,
            'created_at': _iso(self.created_at),
            'responded_at': _iso(self.responded_at),
        }
