from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS', []))

    from app.errors import register_error_handlers
    register_error_handlers(flask_app)

    from app.auth import init_auth
    init_auth()

    # Import and register blueprints here
    from app.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from app.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from app.api.stats import stats
    flask_app.register_blueprint(stats, url_prefix='/api/stats')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from app.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = [('alice@example.com', 'Alice'), ('bob@example.com', 'Bob'), ('cara@example.com', 'Cara')]
            for email, name in users:
                user = User(email=email, display_name=name)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
