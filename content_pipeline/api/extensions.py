"""
Flask extensions shared by the application and its blueprints.

Extensions are created unbound here and attached in ``create_app``.
"""

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from ..utils.config import Config


# Default limits, storage URI and the enabled flag come from RATELIMIT_* app config
limiter = Limiter(key_func=get_remote_address)


def pipeline_config() -> Config:
    """Configuration object the current application was created with."""
    return current_app.extensions['pipeline_config']


def create_limit() -> str:
    return current_app.config['RATELIMIT_CREATE']
