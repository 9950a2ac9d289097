import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///tab.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Appended to every password before hashing
    PASSWORD_SECRET = os.environ.get('PASSWORD_SECRET', 'tab_game_secret')
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    # Forced-termination timers (seconds)
    WAITING_TIMEOUT_SEC = int(os.environ.get('WAITING_TIMEOUT_SEC', '300'))
    TURN_TIMEOUT_SEC = int(os.environ.get('TURN_TIMEOUT_SEC', '120'))
    # When disabled, timers are registered but never started (tests fire them by hand)
    TIMERS_ENABLED = os.environ.get('TIMERS_ENABLED', '1').lower() in ('1', 'true', 'yes')
    RANKING_LIMIT = int(os.environ.get('RANKING_LIMIT', '10'))
    # Select the piece and then its destination instead of a single click
    TWO_CLICK_MOVES = os.environ.get('TWO_CLICK_MOVES', '0').lower() in ('1', 'true', 'yes')
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
