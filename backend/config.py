import json
import os


def _fallback_directory():
    raw = os.environ.get('FALLBACK_DIRECTORY')
    if raw:
        return json.loads(raw)
    return {
        'admin@example.com': 'janvier 2020',
        'alice@example.com': 'mars 2021',
        'bob@example.com': 'juin 2025',
        'carol@example.com': 'septembre 2023',
    }


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///espresso.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # The one identity allowed to drive the game
    ADMIN_IDENTITY = os.environ.get('ADMIN_IDENTITY', 'admin@example.com')
    # Room / results key and the single question's answer
    GAME_ID = os.environ.get('GAME_ID', 'espresso')
    CORRECT_ANSWER = os.environ.get('CORRECT_ANSWER', 'echantons')
    TOTAL_QUESTIONS = int(os.environ.get('TOTAL_QUESTIONS', '1'))
    # Countdowns (seconds)
    PHOTO_DURATION_SEC = int(os.environ.get('PHOTO_DURATION_SEC', '10'))
    QUESTION_DURATION_SEC = int(os.environ.get('QUESTION_DURATION_SEC', '10'))
    # Points for an instant correct answer; one point lost per second
    MAX_QUESTION_SCORE = float(os.environ.get('MAX_QUESTION_SCORE', '10'))
    # Countdowns run as background tasks unless disabled (tests tick them by hand)
    RUN_COUNTDOWNS = os.environ.get('RUN_COUNTDOWNS', '1') != '0'
    # Used when the employee table cannot be reached
    FALLBACK_DIRECTORY = _fallback_directory()
    # Data chat (Genie) proxy
    GENIE_HOST = os.environ.get('GENIE_HOST', '')
    GENIE_TOKEN = os.environ.get('GENIE_TOKEN', '')
    GENIE_SPACE_ID = os.environ.get('GENIE_SPACE_ID', '')
    CHAT_POLL_ATTEMPTS = int(os.environ.get('CHAT_POLL_ATTEMPTS', '30'))
    CHAT_POLL_DELAY_SEC = float(os.environ.get('CHAT_POLL_DELAY_SEC', '2'))
    CHAT_TIMEOUT_SEC = float(os.environ.get('CHAT_TIMEOUT_SEC', '10'))
