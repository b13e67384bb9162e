# config/settings/__init__.py
"""
Settings initialization - loads appropriate settings based on environment.
"""
import os

env = os.environ.get('DJANGO_ENV', 'development')

if env == 'test':
    from .test import *
else:
    from .development import *
