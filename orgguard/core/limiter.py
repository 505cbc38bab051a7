from slowapi import Limiter

from orgguard.core import config
from orgguard.features.users.dependencies import get_authorization_header


limiter = Limiter(
    key_func=get_authorization_header,
    default_limits=[config.RATE_LIMIT],
    enabled=config.RATE_LIMIT_ENABLED,
)
