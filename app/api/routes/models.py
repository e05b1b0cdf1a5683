import logging

import httpx
from fastapi import APIRouter, Depends

from app.api.dependencies import get_completion_client, get_settings
from app.api.security import get_current_user_id
from app.core.config import Settings
from app.schemas.model_schema import ModelInfo, ModelListResponse
from app.services.completion_client import FALLBACK_MODELS, CompletionClient

logger = logging.getLogger(__name__)
router = APIRouter()


def _fallback() -> list[ModelInfo]:
    return [ModelInfo(**m) for m in FALLBACK_MODELS]


@router.get("/", response_model=ModelListResponse)
def list_models(
    settings: Settings = Depends(get_settings),
    client: CompletionClient = Depends(get_completion_client),
    _user_id: str = Depends(get_current_user_id),
):
    """Models the provider can route to, or a short built-in list if it cannot be reached."""
    if not settings.OPENROUTER_API_KEY:
        return ModelListResponse(data=_fallback())

    try:
        models = [ModelInfo(**m) for m in client.list_models()]
    except (httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        logger.warning("Could not load provider models; using fallback list. error=%s", str(e))
        models = []
    return ModelListResponse(data=models or _fallback())
