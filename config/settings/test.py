"""
Test settings: in-memory SQLite unless DATABASE_URL points elsewhere.
"""
import os

os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')

from .base import *  # noqa: E402

DEBUG = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING['loggers']['fees']['level'] = 'WARNING'
LOGGING['loggers']['payments']['level'] = 'WARNING'
LOGGING['loggers']['students']['level'] = 'WARNING'
