from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    if not raw or raw == '*':
        return '*'
    return [o.strip() for o in raw.split(',') if o.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from quiz.main import main
    flask_app.register_blueprint(main)

    from quiz.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api')

    _init_services(flask_app)

    from quiz.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('seed-employees')
    def seed_employees_command():
        """Drops, recreates, and seeds the employee table from the fallback directory."""
        from quiz.models import Employee
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            for email, period in flask_app.config.get('FALLBACK_DIRECTORY', {}).items():
                db.session.add(Employee(email=email, arrival_month_year=period))
            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(seed_employees_command)

    return flask_app


def _init_services(flask_app):
    """Build the game room and its collaborators for this app."""
    from quiz.services import QuizServices
    from quiz.services.chat import ChatProxy
    from quiz.services.game import BroadcastRouter, GameController, GameSession, TokenRegistry
    from quiz.services.game.controller import GameSettings, run_inline
    from quiz.services.identity import IdentityOracle
    from quiz.services.results import ResultsSink

    cfg = flask_app.config
    settings = GameSettings.from_config(cfg)
    # Background work runs inline in tests so assertions see its effects
    spawn = run_inline if cfg.get('TESTING') else socketio.start_background_task

    tokens = TokenRegistry()
    session = GameSession(
        room_id=settings.game_id,
        photo_seconds=settings.photo_seconds,
        question_seconds=settings.question_seconds,
        total_questions=settings.total_questions,
    )
    router = BroadcastRouter(socketio, session.roster, settings.game_id)
    controller = GameController(
        session, tokens, router, settings,
        results_sink=ResultsSink(flask_app),
        spawn=spawn,
        sleep=socketio.sleep,
    )
    chat = ChatProxy(
        cfg.get('GENIE_HOST', ''),
        cfg.get('GENIE_TOKEN', ''),
        cfg.get('GENIE_SPACE_ID', ''),
        attempts=int(cfg.get('CHAT_POLL_ATTEMPTS', 30)),
        delay=float(cfg.get('CHAT_POLL_DELAY_SEC', 2)),
        timeout=float(cfg.get('CHAT_TIMEOUT_SEC', 10)),
        sleep=socketio.sleep,
    )
    flask_app.extensions['quiz'] = QuizServices(
        tokens=tokens,
        oracle=IdentityOracle(cfg.get('FALLBACK_DIRECTORY')),
        controller=controller,
        chat=chat,
        spawn=spawn,
    )
