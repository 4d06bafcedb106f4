from slowapi import Limiter
from slowapi.util import get_remote_address

from albumvault.config import settings

# Default IP-based key; applied to the credential endpoints only.
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
