"""
Chat Relay Service
Handles: forwarding website chat conversations to the Anthropic Messages API
Port: 3000 (PORT)

The browser never sees the API key. It posts the whole conversation to
/api/chat, we attach the spa's system prompt and return the first text
segment of the reply.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_relay import __version__
from chat_relay.anthropic_client import AnthropicClient, ChatCompleter
from chat_relay.config import Settings
from chat_relay.dependencies import get_completer, get_settings
from chat_relay.exceptions import (
    ChatProcessingException,
    InvalidChatRequestException,
    RelayException,
    UpstreamError,
)
from chat_relay.models import ChatRequest, ChatResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"
HEALTH_PATH = "/api/health"

router = APIRouter()


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.post(
    CHAT_PATH,
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    body: ChatRequest,
    settings: Settings = Depends(get_settings),
    completer: ChatCompleter = Depends(get_completer),
):
    logger.info("Chat request: %d turns", len(body.messages))

    try:
        reply = await completer.complete_chat(settings.system_prompt, body.messages)
        logger.info("Chat reply: %d chars", len(reply))
        response = ChatResponse(message=reply, success=True)
    except UpstreamError as e:
        logger.error("Upstream call failed: %s", e)
        raise ChatProcessingException() from e
    except Exception as e:
        logger.exception("Chat processing failed")
        raise ChatProcessingException() from e

    return response


@router.get(HEALTH_PATH, response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(status="ok", message=f"{settings.service_name} API is running")


# ── Exception handlers ────────────────────────────────────────────────────────

async def relay_exception_handler(request: Request, exc: RelayException):
    return JSONResponse(status_code=exc.status_code, content=exc.content)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    if request.url.path != CHAT_PATH:
        return await request_validation_exception_handler(request, exc)
    logger.warning("Rejected chat request: %s", [e.get("type") for e in exc.errors()])
    return await relay_exception_handler(request, InvalidChatRequestException())


async def not_found(request: Request, exc: Exception):
    return JSONResponse(
        status_code=404,
        content={"error": "Not Found", "message": f"Available endpoints: {CHAT_PATH}, {HEALTH_PATH}"},
    )


# ── App ───────────────────────────────────────────────────────────────────────

def create_app(settings: Optional[Settings] = None, completer: Optional[ChatCompleter] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    completer = completer or AnthropicClient(settings)

    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.api_key:
            logger.warning("ANTHROPIC_API_KEY is not set; chat requests will fail")
        logger.info("Server running on port %s", settings.port)
        logger.info("Health check: http://localhost:%s%s", settings.port, HEALTH_PATH)
        logger.info("Chat endpoint: http://localhost:%s%s", settings.port, CHAT_PATH)
        yield

    app = FastAPI(title=f"{settings.service_name} API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.completer = completer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayException, relay_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(404, not_found)

    app.include_router(router)
    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
