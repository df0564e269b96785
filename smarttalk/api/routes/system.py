import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from smarttalk.api.services import get_fallback_manager
from smarttalk.common.clock import get_current_datetime, utc_now
from smarttalk.common.mailer import is_email_configured
from smarttalk.common.models import PromptList, SuggestedPrompt
from smarttalk.config.default_config import CONFIG
from smarttalk.db.mongo import db_manager
from smarttalk.providers import AllProvidersFailedError, ProviderFallbackManager

logger = logging.getLogger("SmartTalkAI")

router = APIRouter(prefix="/api")

DIAGNOSTIC_PROMPT = "Say hello in 5 words"


def select_suggested_prompts(prompts: List[dict], now: datetime, page_size: int = 4) -> List[dict]:
    """Picks a window of prompts that shifts every 15 minutes."""
    if len(prompts) <= page_size:
        return list(prompts)
    seed = now.hour * 60 + now.minute // 15
    start_index = seed % (len(prompts) - page_size + 1)
    return prompts[start_index:start_index + page_size]


def _config(request: Request) -> dict:
    return getattr(request.app.state, "config", None) or CONFIG


def _status(configured: bool) -> str:
    return "Configured" if configured else "Not configured"


@router.get("/test", summary="Service health and provider configuration")
async def health(
    request: Request,
    fallback_manager: ProviderFallbackManager = Depends(get_fallback_manager),
):
    config = _config(request)
    providers = {
        provider.name.lower(): _status(provider.is_configured)
        for provider in fallback_manager.providers
    }
    mongo_ok = await db_manager.ping()
    return {
        "message": "Smart Talk AI Backend Running!",
        "timestamp": utc_now().isoformat(),
        "mongodb": "Connected" if mongo_ok else "Disconnected",
        "providers": providers,
        "emailService": _status(is_email_configured(config.get("email_settings", {}))),
        "version": config.get("server_settings", {}).get("version"),
    }


@router.get("/test-ai", summary="Run one prompt through the provider fallback chain")
async def test_ai(fallback_manager: ProviderFallbackManager = Depends(get_fallback_manager)):
    logger.info("===== TESTING AI PROVIDERS =====")
    try:
        result = await fallback_manager.generate(DIAGNOSTIC_PROMPT)
    except AllProvidersFailedError as e:
        logger.error(f"AI provider test failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {
        "success": True,
        "response": result.content,
        "provider": result.provider,
        "model": result.model,
    }


@router.get("/prompts/suggested", response_model=PromptList, summary="Rotating suggested prompts")
async def suggested_prompts(request: Request):
    config = _config(request)
    prompt_settings = config.get("prompt_settings", {})
    now = get_current_datetime(prompt_settings.get("timezone", "UTC"))
    selected = select_suggested_prompts(
        config.get("suggested_prompts", []), now, prompt_settings.get("page_size", 4)
    )
    return PromptList(prompts=[SuggestedPrompt(**p) for p in selected])
