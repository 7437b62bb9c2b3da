from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine per app; the redis connection inside it opens on first use
    from app.services.leaderboard import EXTENSION_KEY, build_engine
    flask_app.extensions[EXTENSION_KEY] = build_engine(flask_app.config)

    from app.main import main
    flask_app.register_blueprint(main)

    from app.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard)

    from app.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the score history tables."""
        import app.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('leaderboard-clear')
    def leaderboard_clear_command():
        """Removes every entry from the leaderboard."""
        engine = flask_app.extensions[EXTENSION_KEY]
        if engine.clear():
            print('Leaderboard cleared.')
        else:
            raise click.ClickException('Leaderboard backend unavailable')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_clear_command)

    return flask_app
