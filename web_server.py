"""
Web server for the investigation game.

This server:
- Exposes the game API (start, ask, accuse, timer) as JSON over HTTP
- Uses llm_prompt_core for character dialogue
- Keeps live games in a SessionRegistry with a background sweep
- Serves health and Prometheus metrics endpoints
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import web
from dotenv import load_dotenv
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Load environment variables from .env file before constants are read
load_dotenv()

from constants import (
    ANONYMOUS_PLAYER_ID,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    PLAYER_ID_HEADER,
    STRESS_MAX,
    STRESS_MIN,
)
from config import list_mysteries
from exceptions import InvalidRequestError, InvestigationError
from game_events import EventDispatcher, default_dispatcher
from llm_prompt_core.models.base import BaseLLMModel
from llm_prompt_core.models.factory import create_dialogue_model
from logging_config import setup_logging
from metrics import track_error, track_request
from mysteries.base import CharacterProfile
from mysteries.loader import load_mystery
from sessions.dialogue_engine import DialogueEngine
from sessions.game_session import GameSession
from sessions.session_registry import SessionRegistry

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

REGISTRY_KEY = web.AppKey("registry", SessionRegistry)
ENGINE_KEY = web.AppKey("dialogue_engine", DialogueEngine)


# === REQUEST BODIES ===


class _RequestBody(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class StartGameRequest(_RequestBody):
    mystery_id: str = Field(min_length=1)


class AskRequest(_RequestBody):
    character_name: str = Field(min_length=1)
    question: str = Field(min_length=1)
    current_stress: float = Field(default=0.0, ge=STRESS_MIN, le=STRESS_MAX, strict=True)


class AccuseRequest(_RequestBody):
    suspect: str = Field(min_length=1)


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        problems.append(f"{field}: {item['msg']}")
    return "; ".join(problems)


async def parse_body(request: web.Request, schema: type[BaseModel]) -> Any:
    """
    Decode and validate a JSON request body.

    Raises:
        InvalidRequestError: If the body is not JSON or does not match the schema
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError("Request body must be a JSON object") from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidRequestError(_describe_validation_error(e)) from e


def get_player_id(request: web.Request) -> str:
    """Player identity as asserted by the upstream auth layer."""
    return request.headers.get(PLAYER_ID_HEADER, "").strip() or ANONYMOUS_PLAYER_ID


def character_view(character: CharacterProfile) -> dict[str, str]:
    """Public fields of a character; the sprite only when the mystery sets one."""
    view = {"name": character.name, "personality": character.personality}
    if character.sprite:
        view["sprite"] = character.sprite
    return view


def get_owned_session(request: web.Request) -> GameSession:
    """Resolve the session in the URL and check the caller owns it."""
    session = request.app[REGISTRY_KEY].get_session(request.match_info["session_id"])
    session.ensure_owner(get_player_id(request))
    return session


# === MIDDLEWARE ===


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Translate engine errors into JSON responses and record request metrics."""
    resource = request.match_info.route.resource
    route = resource.canonical if resource is not None else "unmatched"

    with track_request(route) as outcome:
        try:
            response = await handler(request)
            outcome["status"] = "success"
            return response
        except InvestigationError as e:
            track_error(e.error_code)
            if e.status_code >= 500:
                logger.warning("%s %s failed: %s", request.method, request.path, e)
            return web.json_response(
                {"error": e.error_code, "message": str(e)},
                status=e.status_code,
            )
        except web.HTTPException:
            raise
        except Exception:
            track_error("internal_error")
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return web.json_response(
                {"error": "internal_error", "message": "Server error. Please try again."},
                status=500,
            )


# === HANDLERS ===


async def list_mysteries_handler(request: web.Request) -> web.Response:
    """GET /api/v1/mysteries - List available mysteries."""
    return web.json_response({"mysteries": list_mysteries()})


async def start_game_handler(request: web.Request) -> web.Response:
    """POST /api/v1/game/start - Load a mystery and start a new game."""
    body = await parse_body(request, StartGameRequest)
    player_id = get_player_id(request)

    loop = asyncio.get_running_loop()
    mystery = await loop.run_in_executor(None, load_mystery, body.mystery_id)
    session = request.app[REGISTRY_KEY].create_session(mystery, player_id)

    return web.json_response({
        "session_id": session.session_id,
        "title": mystery.title,
        "intro": mystery.introduction,
        "characters": [character_view(character) for character in mystery.characters],
        "killer": mystery.killer,
        "location": mystery.location,
        "weapon": mystery.weapon,
    })


async def ask_handler(request: web.Request) -> web.Response:
    """POST /api/v1/game/{session_id}/ask - Question a character."""
    session = get_owned_session(request)
    body = await parse_body(request, AskRequest)

    result = await session.ask(body.character_name, body.question, body.current_stress)
    return web.json_response(result.to_dict())


async def accuse_handler(request: web.Request) -> web.Response:
    """POST /api/v1/game/{session_id}/accuse - Accuse a suspect and end the game."""
    session = get_owned_session(request)
    body = await parse_body(request, AccuseRequest)

    verdict = await session.accuse(body.suspect)
    return web.json_response(verdict.to_dict())


async def timer_handler(request: web.Request) -> web.Response:
    """GET /api/v1/game/{session_id}/timer - Current countdown state."""
    session = get_owned_session(request)
    status = await session.timer_status()
    return web.json_response(status.to_dict())


async def toggle_timer_handler(request: web.Request) -> web.Response:
    """POST /api/v1/game/{session_id}/timer/toggle - Pause or resume the countdown."""
    session = get_owned_session(request)
    enabled = await session.toggle_timer()
    return web.json_response({"timer_enabled": enabled})


async def health_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "sessions": len(request.app[REGISTRY_KEY])})


async def metrics_handler(request: web.Request) -> web.Response:
    return web.Response(body=generate_latest(), headers={"Content-Type": CONTENT_TYPE_LATEST})


# === LIFECYCLE ===


async def on_startup(app: web.Application) -> None:
    """Start the session sweeper and probe the dialogue model."""
    app[REGISTRY_KEY].start_sweeper()

    engine = app[ENGINE_KEY]
    if await engine.check_availability():
        logger.info("Dialogue model is available")
    else:
        logger.warning(
            "Dialogue model %s is not reachable; questions will fail until it is",
            getattr(engine.model, "model_name", "unknown"),
        )


async def on_cleanup(app: web.Application) -> None:
    await app[REGISTRY_KEY].close()


# Create app
async def create_app(
    model: BaseLLMModel | None = None,
    events: EventDispatcher | None = None,
    **registry_options: Any,
) -> web.Application:
    """
    Create and configure the web application.

    Args:
        model: Text-generation model; built from configuration when omitted
        events: Lifecycle event dispatcher; logging and metrics listeners by default
        **registry_options: Overrides for SessionRegistry (durations, limits, clock)
    """
    engine = DialogueEngine(model or create_dialogue_model())
    registry = SessionRegistry(engine, events or default_dispatcher(), **registry_options)

    app = web.Application(middlewares=[error_middleware])
    app[ENGINE_KEY] = engine
    app[REGISTRY_KEY] = registry

    app.router.add_get(f"{API_PREFIX}/mysteries", list_mysteries_handler)
    app.router.add_post(f"{API_PREFIX}/game/start", start_game_handler)
    app.router.add_post(f"{API_PREFIX}/game/{{session_id}}/ask", ask_handler)
    app.router.add_post(f"{API_PREFIX}/game/{{session_id}}/accuse", accuse_handler)
    app.router.add_get(f"{API_PREFIX}/game/{{session_id}}/timer", timer_handler)
    app.router.add_post(f"{API_PREFIX}/game/{{session_id}}/timer/toggle", toggle_timer_handler)
    app.router.add_get("/health", health_handler)
    app.router.add_get("/metrics", metrics_handler)

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    return app


# Main entry point
def main() -> None:
    """Start the web server."""
    setup_logging()

    logger.info("=" * 60)
    logger.info("Investigation Game Server")
    logger.info("=" * 60)
    logger.info("Starting server on http://%s:%d", DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT)
    logger.info("Press Ctrl+C to stop")
    logger.info("=" * 60)

    # A client that disconnects mid-question cancels its handler and frees the model slot
    web.run_app(
        create_app(),
        host=DEFAULT_SERVER_HOST,
        port=DEFAULT_SERVER_PORT,
        handler_cancellation=True,
    )


if __name__ == '__main__':
    main()
