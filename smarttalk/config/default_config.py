from smarttalk.config.settings import (
    PROVIDER_SETTINGS, GENERATION_SETTINGS, FALLBACK_SETTINGS, STREAM_SETTINGS,
    DATABASE_SETTINGS, AUTH_SETTINGS, EMAIL_SETTINGS, RATE_LIMIT_SETTINGS, CORS_SETTINGS,
    PROMPT_SETTINGS, SERVER_SETTINGS,
)
from smarttalk.config.suggested_prompts import SUGGESTED_PROMPTS

"""Default configuration for the application.

Assembles the environment-driven settings into the single dictionary that the
ConfigManager hands out.
"""

CONFIG = {
    "providers": PROVIDER_SETTINGS,
    "generation_settings": GENERATION_SETTINGS,
    "fallback_settings": FALLBACK_SETTINGS,
    "stream_settings": STREAM_SETTINGS,
    "database_settings": DATABASE_SETTINGS,
    "auth_settings": AUTH_SETTINGS,
    "email_settings": EMAIL_SETTINGS,
    "rate_limit_settings": RATE_LIMIT_SETTINGS,
    "cors_settings": CORS_SETTINGS,
    "prompt_settings": PROMPT_SETTINGS,
    "server_settings": SERVER_SETTINGS,
    "suggested_prompts": SUGGESTED_PROMPTS,
}
