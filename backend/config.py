import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open a socket
    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ALLOWED_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',')
        if origin.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Match identifiers: length and how many collisions to tolerate before giving up
    MATCH_ID_LENGTH = int(os.environ.get('MATCH_ID_LENGTH', '6'))
    MATCH_ID_MAX_ATTEMPTS = int(os.environ.get('MATCH_ID_MAX_ATTEMPTS', '20'))
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '32'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '500'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
