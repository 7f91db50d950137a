"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in both api/main.py (to mount as middleware) and
api/routes/v1/auth.py (to apply the login limit with @limiter.limit()).

A single shared instance means all routes share the same in-memory counter
store. Per-module instances would each keep an isolated counter and the
limits would never trigger.

LOGIN_LIMIT comes from LOGIN_RATE_LIMIT so tests and deployments can loosen
or tighten brute-force protection without code changes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

LOGIN_LIMIT: str = get_settings().login_rate_limit

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
