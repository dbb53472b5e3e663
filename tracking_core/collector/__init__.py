"""
Development collector: a Flask receiver for events, sessions and error reports.
"""

from .factory import create_collector_app
from .routes import create_collector_blueprint

__all__ = ['create_collector_app', 'create_collector_blueprint']
