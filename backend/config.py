import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed for HTTP and websocket traffic
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGIN', 'http://localhost:5173,http://127.0.0.1:5173').split(',')
        if origin.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/poker')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '4000'))
    # Kick the older socket when the same user id connects twice. 0 disables.
    ENFORCE_SINGLE_CONNECTION = os.environ.get('ENFORCE_SINGLE_CONNECTION', '1') != '0'
