"""create users, games, guesses and hints

Revision ID: 5c2e8a41d7b0
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e8a41d7b0'
down_revision = None
branch_labels = None
depends_on = None


def _status(name, values):
    return sa.Enum(*values, name=name, native_enum=False, length=16)


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('display_name', sa.String(length=64), nullable=False),
            sa.Column('total_winnings', sa.Numeric(10, 2), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'games' not in existing_tables:
        op.create_table(
            'games',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('creator_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('guesser_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('song_title', sa.String(length=255), nullable=False),
            sa.Column('artist', sa.String(length=255), nullable=False),
            sa.Column('starting_prize', sa.Numeric(10, 2), nullable=False),
            sa.Column('current_prize', sa.Numeric(10, 2), nullable=False),
            sa.Column('status', _status('game_status', ['active', 'solved']), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('solved_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_games_creator_id', 'games', ['creator_id'])
        op.create_index('ix_games_guesser_id', 'games', ['guesser_id'])

    if 'guesses' not in existing_tables:
        op.create_table(
            'guesses',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('games.id'), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('guess_text', sa.Text(), nullable=False),
            sa.Column('prize_before', sa.Numeric(10, 2), nullable=False),
            sa.Column('prize_after', sa.Numeric(10, 2), nullable=False),
            sa.Column('status', _status('guess_status', ['pending', 'correct', 'incorrect']), nullable=False),
            sa.Column('feedback', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_guesses_game_id', 'guesses', ['game_id'])

    if 'hints' not in existing_tables:
        op.create_table(
            'hints',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('games.id'), nullable=False),
            sa.Column('hint_request', sa.Text(), nullable=False),
            sa.Column('hint_response', sa.Text(), nullable=True),
            sa.Column('prize_before', sa.Numeric(10, 2), nullable=False),
            sa.Column('prize_after', sa.Numeric(10, 2), nullable=False),
            sa.Column('status', _status('hint_status', ['pending', 'answered']), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_hints_game_id', 'hints', ['game_id'])


def downgrade():
    op.drop_index('ix_hints_game_id', table_name='hints')
    op.drop_table('hints')
    op.drop_index('ix_guesses_game_id', table_name='guesses')
    op.drop_table('guesses')
    op.drop_index('ix_games_guesser_id', table_name='games')
    op.drop_index('ix_games_creator_id', table_name='games')
    op.drop_table('games')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
