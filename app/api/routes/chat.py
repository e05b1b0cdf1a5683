import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.api.dependencies import get_completion_client, get_db, get_settings
from app.api.security import identity_from_header
from app.core.config import Settings
from app.core.errors import InvalidRequest, RelayError
from app.schemas.chat_schema import ChatErrorResponse, ChatRequest, ChatResponse
from app.services.chat_relay import ChatRelay
from app.services.chat_store import ChatStore
from app.services.completion_client import CompletionClient

logger = logging.getLogger(__name__)
router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message}, headers=CORS_HEADERS)


async def _parse_body(request: Request) -> ChatRequest:
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidRequest("Request body must be JSON")
    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in e.errors())
        raise InvalidRequest(f"Invalid request body: {fields}")


@router.options("")
def chat_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "",
    response_model=ChatResponse,
    responses={500: {"model": ChatErrorResponse, "description": "Any failure"}},
)
async def relay_chat(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client: CompletionClient = Depends(get_completion_client),
):
    try:
        body = await _parse_body(request)
        logger.info(
            "Chat request: conversation=%s model=%s message_length=%d",
            body.conversation_id, body.model, len(body.message),
        )

        authorization: Optional[str] = request.headers.get("Authorization")
        user_id = identity_from_header(authorization)

        relay = ChatRelay(settings, ChatStore(db, user_id), client)
        reply = await run_in_threadpool(relay.handle, body)
    except RelayError as e:
        logger.error("Chat relay failed: %s: %s", type(e).__name__, e.message)
        return _error_response(e.message)
    except Exception as e:
        logger.exception("Unexpected error in chat relay")
        return _error_response(str(e) or "Unknown error")

    return JSONResponse(content=ChatResponse(message=reply).model_dump(), headers=CORS_HEADERS)
