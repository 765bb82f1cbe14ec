"""
Development settings
"""
from .base import *

DEBUG = True

LOGGING['loggers']['fees']['level'] = 'DEBUG'
LOGGING['loggers']['payments']['level'] = 'DEBUG'
