"""
api/limiter.py -- The one slowapi Limiter the whole app shares.

api/main.py mounts it (SlowAPIMiddleware reads app.state.limiter) and the
auth routes decorate themselves with it. Counters live in this object's
memory:// storage, so a second Limiter elsewhere would count separately and
never trip.

Attempts are keyed by client address and counted whether or not the
credentials were correct. RATE_LIMIT_ENABLED=false turns the middleware
into a pass-through.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=_settings.rate_limit_enabled,
)

LOGIN_LIMIT = _settings.login_rate_limit
REGISTER_LIMIT = _settings.register_rate_limit
