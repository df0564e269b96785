import os

"""Common configuration settings, read from the environment at import time."""

def _env_list(name: str, default: str) -> list:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]

PROVIDER_SETTINGS = {
    "gemini": {
        "name": "Gemini",
        "api_key": os.getenv("GEMINI_API_KEY"),
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "default_model": "gemini-2.0-flash-exp",
    },
    "openai": {
        "name": "OpenAI",
        "api_key": os.getenv("OPENAI_API_KEY"),
        "base_url": "https://api.openai.com/v1",
        "default_model": "gpt-3.5-turbo",
    },
    "cohere": {
        "name": "Cohere",
        "api_key": os.getenv("COHERE_API_KEY"),
        "base_url": "https://api.cohere.ai/v1",
        "default_model": "command-r",
    },
}

# Identical across vendors; each adapter maps these to its own parameter names.
GENERATION_SETTINGS = {
    "temperature": 0.7,
    "max_output_tokens": 2000,
}

FALLBACK_SETTINGS = {
    "order": _env_list("PROVIDER_ORDER", "gemini,openai,cohere"),
    "retry_delay_seconds": float(os.getenv("FALLBACK_RETRY_DELAY_SECONDS", "0.5")),
    "request_timeout_seconds": float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "60")),
}

STREAM_SETTINGS = {
    "chunk_size": int(os.getenv("STREAM_CHUNK_SIZE", "5")),
    "chunk_delay_seconds": float(os.getenv("STREAM_CHUNK_DELAY_SECONDS", "0.03")),
}

DATABASE_SETTINGS = {
    "mongo_url": os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
    "db_name": os.getenv("MONGO_DB_NAME", "nexaflow-ai"),
}

AUTH_SETTINGS = {
    "jwt_secret": os.getenv("JWT_SECRET", "change-me"),
    "jwt_algorithm": "HS256",
    "token_expire_days": int(os.getenv("JWT_EXPIRE_DAYS", "7")),
    "public_base_url": os.getenv("PUBLIC_BASE_URL", "http://localhost:5001"),
}

# Verification mail goes out only when both credentials are set.
EMAIL_SETTINGS = {
    "user": os.getenv("EMAIL_USER"),
    "password": os.getenv("EMAIL_PASSWORD"),
    "host": os.getenv("EMAIL_HOST", "smtp.gmail.com"),
    "port": int(os.getenv("EMAIL_PORT", "587")),
    "start_tls": os.getenv("EMAIL_START_TLS", "true").lower() == "true",
    "timeout_seconds": float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10")),
    "sender_name": "Smart Talk AI",
}

RATE_LIMIT_SETTINGS = {
    "enabled": os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",
    "default_limits": [os.getenv("RATE_LIMIT", "100/15minutes")],
    "storage_uri": os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
}

CORS_SETTINGS = {
    "allow_origins": _env_list("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"),
}

PROMPT_SETTINGS = {
    "timezone": os.getenv("PROMPTS_TIMEZONE", "UTC"),
    "page_size": 4,
}

SERVER_SETTINGS = {
    "host": os.getenv("HOST", "0.0.0.0"),
    "port": int(os.getenv("PORT", "5001")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "version": "2.0.0",
    # HSTS only makes sense behind HTTPS
    "enable_hsts": os.getenv("ENABLE_HSTS", "false").lower() == "true",
}
