from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

# Shared limiter, attached to app.state in main.py
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)
