import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from openai import APIStatusError, APITimeoutError
from pydantic import ValidationError

from relay.models import MoveRequest, MoveResponse
from relay.utils.llm import EmptyReplyError, is_move_token, request_move

logger = logging.getLogger(__name__)

router = APIRouter()

USAGE = 'AI chess moves server. POST / with JSON { moves: [{ from: "e2", to: "e4", capture: false }] }'

RELAY_METHODS = ["POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class BodyTooLarge(Exception):
    pass


def _text(message: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status_code)


async def read_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise BodyTooLarge()
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise BodyTooLarge()
    return bytes(body)


def parse_move_request(body: bytes) -> MoveRequest:
    return MoveRequest.model_validate_json(body)


@router.get("/{path:path}", response_class=PlainTextResponse)
def usage(path: str):
    return USAGE


@router.api_route("/{path:path}", methods=RELAY_METHODS)
async def relay_move(request: Request, path: str):
    settings = request.app.state.settings
    client = request.app.state.llm_client

    try:
        try:
            body = await read_body(request, settings.max_body_bytes)
        except BodyTooLarge:
            logger.warning("Rejected request body over %d bytes", settings.max_body_bytes)
            return _text("Request body too large.", 413)

        try:
            payload = parse_move_request(body)
        except ValidationError as e:
            logger.warning("Malformed move request: %s", e)
            return _text("Internal server error.", 500)

        try:
            move = await request_move(client, settings.gpt_model, payload.history)
        except APIStatusError as e:
            logger.error("OpenAI error %s %s", e.status_code, e.response.text)
            return _text("API error.", 500)
        except APITimeoutError:
            logger.error("OpenAI request timed out after %ss", settings.upstream_timeout_s)
            return _text("Upstream timed out.", 504)
        except EmptyReplyError as e:
            logger.warning("Could not get move from model %r", e.raw)
            return _text("Empty reply from server.", 500)

        if settings.strict_moves and not is_move_token(move):
            logger.warning("Model reply is not a UCI move %r", move)
            return _text("Invalid move from server.", 500)

        return JSONResponse(MoveResponse(move=move).model_dump())
    except Exception:
        logger.exception("Move relay failed")
        return _text("Internal server error.", 500)
