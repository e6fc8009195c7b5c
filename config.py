import os
from datetime import timedelta


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Settings read from the environment when the app is created."""

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///kakei.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')

    # auth cookie
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET', 'dev-jwt-secret-change-me')
    JWT_TOKEN_LOCATION = ['cookies']
    JWT_ACCESS_COOKIE_NAME = 'auth'
    JWT_ACCESS_COOKIE_PATH = '/'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_SESSION_COOKIE = False
    JWT_COOKIE_SAMESITE = 'Lax'
    JWT_COOKIE_SECURE = _env_bool('COOKIE_SECURE', False)
    JWT_COOKIE_CSRF_PROTECT = False

    ADMIN_USER = os.environ.get('ADMIN_USER', 'admin')
    ADMIN_PASS = os.environ.get('ADMIN_PASS', 'admin')

    LOGIN_MAX_ATTEMPTS = int(os.environ.get('LOGIN_MAX_ATTEMPTS', 5))
    LOGIN_WINDOW_SECONDS = int(os.environ.get('LOGIN_WINDOW_SECONDS', 60))

    HISTORY_PAGE_SIZE = int(os.environ.get('HISTORY_PAGE_SIZE', 50))
    HISTORY_MAX_PAGE_SIZE = int(os.environ.get('HISTORY_MAX_PAGE_SIZE', 500))

    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    PUBLIC_DIR = os.environ.get('PUBLIC_DIR', 'public')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
