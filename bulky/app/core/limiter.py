"""Shared rate limiter. Routers decorate endpoints with ``@limiter.limit``; main.py installs it on app.state."""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
