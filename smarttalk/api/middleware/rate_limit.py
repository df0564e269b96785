from slowapi import Limiter
from slowapi.util import get_remote_address

from smarttalk.config.settings import RATE_LIMIT_SETTINGS


def get_limiter(settings: dict = None) -> Limiter:
    settings = settings or RATE_LIMIT_SETTINGS
    # storage_uri accepts 'memory://' or a 'redis://' URI (limits library schemes).
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=settings["default_limits"],
        storage_uri=settings["storage_uri"],
        strategy="fixed-window",
    )
    limiter.enabled = settings.get("enabled", True)
    return limiter


limiter = get_limiter()
