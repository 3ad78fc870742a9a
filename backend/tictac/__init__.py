from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from tictac.services.matches import MatchRegistry
from tictac.services.participants import ParticipantDirectory

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # In-memory state is owned by the app instance, one registry and one directory each
    flask_app.extensions['match_registry'] = MatchRegistry(
        id_length=flask_app.config.get('MATCH_ID_LENGTH', 6),
        max_attempts=flask_app.config.get('MATCH_ID_MAX_ATTEMPTS', 20),
    )
    flask_app.extensions['participant_directory'] = ParticipantDirectory(
        name_max_length=flask_app.config.get('NAME_MAX_LENGTH', 32),
    )

    from tictac.main import main
    flask_app.register_blueprint(main)

    from tictac.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from tictac.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
