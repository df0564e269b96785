import logging
from contextlib import asynccontextmanager
import httpx
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from slowapi.middleware import SlowAPIMiddleware

from smarttalk.common import tracing, logging_config
from smarttalk.common.mailer import is_email_configured
from smarttalk.config import ConfigManager
from smarttalk.config.settings import CORS_SETTINGS, SERVER_SETTINGS
from smarttalk.db.mongo import db_manager
from smarttalk.providers import build_fallback_manager

# Import routers
from smarttalk.api.routes import auth, chat, system
from smarttalk.api.middleware.error_handlers import register_exception_handlers
from smarttalk.api.middleware.rate_limit import limiter
from smarttalk.api.middleware.security_headers import SecurityHeadersMiddleware

logging_config.setup_json_logging(SERVER_SETTINGS["log_level"])
logger = logging.getLogger("SmartTalkAI")
logger.addFilter(logging_config.ApiKeyFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages the application lifecycle (startup and shutdown).

    Builds configuration, the shared HTTP client, the provider fallback
    chain and the MongoDB connection; releases them on shutdown.
    """
    logger.info("Initializing Smart Talk AI backend...")
    config_manager = ConfigManager()
    app.state.config_manager = config_manager
    app.state.config = config_manager.get_active_config()

    provider_settings = config_manager.get_section("providers")
    email_settings = config_manager.get_section("email_settings")
    logging_config.ApiKeyFilter.add_sensitive_keys(
        [p.get("api_key") for p in provider_settings.values()] + [email_settings.get("password")]
    )

    timeout = config_manager.get_section("fallback_settings")["request_timeout_seconds"]
    logger.info("Creating a shared httpx.AsyncClient...")
    app.state.http_client = httpx.AsyncClient(timeout=timeout)

    app.state.fallback_manager = build_fallback_manager(app.state.config, app.state.http_client)
    for provider in app.state.fallback_manager.providers:
        if provider.is_configured:
            logger.info(f"Provider '{provider.name}': configured")
        else:
            logger.warning(f"Provider '{provider.name}': API key not configured")

    if not is_email_configured(email_settings):
        logger.warning("Email service not configured. Verification emails will not be sent.")

    database_settings = config_manager.get_section("database_settings")
    try:
        db_manager.connect(
            mongo_url=database_settings["mongo_url"],
            db_name=database_settings["db_name"],
        )
        await db_manager.ensure_indexes()
    except Exception as e:
        logger.warning(f"Could not connect to MongoDB: {e}. Auth and chat features may be unavailable.")

    logger.info("Application initialized successfully.")
    yield
    logger.info("Shutting down...")

    db_manager.close()

    if hasattr(app.state, "http_client"):
        logger.info("Closing the shared httpx.AsyncClient...")
        await app.state.http_client.aclose()
    logger.info("Application stopped.")


app = FastAPI(
    title="Smart Talk AI", version=SERVER_SETTINGS["version"], lifespan=lifespan
)

app.state.limiter = limiter
register_exception_handlers(app)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=SERVER_SETTINGS["enable_hsts"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_SETTINGS["allow_origins"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(system.router)
app.include_router(auth.router)
app.include_router(chat.router)

tracing.setup_tracing()
FastAPIInstrumentor.instrument_app(app)
