import os

from .utils import constants


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'kampfgericht-dev'
    # Clock (seconds). Use 60 for a quick demo game.
    HALF_TIME_DURATION_SECONDS = int(os.environ.get('HALF_TIME_DURATION_SECONDS', constants.HALF_TIME_DURATION_SECONDS))
    TICK_INTERVAL_SECONDS = float(os.environ.get('TICK_INTERVAL_SECONDS', constants.TICK_INTERVAL_SECONDS))
    AUTOSAVE_DELAY_SECONDS = float(os.environ.get('AUTOSAVE_DELAY_SECONDS', constants.AUTOSAVE_DELAY_SECONDS))
    # Game records: local JSON documents unless a game API is configured
    DATA_DIR = os.environ.get('DATA_DIR') or constants.DEFAULT_DATA_DIR
    GAME_API_URL = os.environ.get('GAME_API_URL') or None
    GAME_API_TIMEOUT = float(os.environ.get('GAME_API_TIMEOUT', constants.GAME_API_TIMEOUT_SECONDS))
    # Bearer token required on scorer endpoints. Unset leaves them open.
    SCORER_API_TOKEN = os.environ.get('SCORER_API_TOKEN') or None
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    HOST = os.environ.get('HOST', '127.0.0.1')
    PORT = int(os.environ.get('PORT', '7122'))
