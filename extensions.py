"""
Shared Flask extension instances.

Created at import time and bound to the app inside create_app().
"""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

# Fixed-window limits per client address. The default limit is read from
# RATELIMIT_DEFAULT when the app is initialised.
limiter = Limiter(key_func=get_remote_address, strategy="fixed-window")

login_manager = LoginManager()
