import logging
import re

import httpx
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from relay.models import Move
from relay.settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a chess move generator. You MUST respond with exactly one move in UCI format "
    "(e.g. e2e4, g1f3, e7e8q for promotion) and nothing else. Do NOT include commentary, "
    "explanation, JSON, or any extra text. If you cannot find a legal move, respond with PASS. "
    "Use standard algebraic coordinates: a1..h8. Use reasonable chess knowledge but do not "
    "invent illegal moves. Avoid castling if unclear."
)
FINAL_INSTRUCTION = "Respond with one UCI move only."
MISSING_API_KEY = "missing"

# UCI long algebraic move (e2e4, e7e8q) or the literal PASS
MOVE_TOKEN_RE = re.compile(r"^(?:[a-h][1-8][a-h][1-8][qrbn]?|pass)$", re.I)


class EmptyReplyError(Exception):
    """The completion carried no usable message content."""

    def __init__(self, raw):
        super().__init__("empty reply from model")
        self.raw = raw


def render_history(moves: list[Move]) -> str:
    return "\n".join(f"{i}. {m.from_}-{m.to}" for i, m in enumerate(moves, start=1))


def build_user_prompt(moves: list[Move]) -> str:
    parts = ["Move history:"]
    if moves:
        parts.append(render_history(moves))
    parts.append(FINAL_INSTRUCTION)
    return "\n".join(parts)


def build_messages(moves: list[Move]) -> list[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(moves)},
    ]


def is_move_token(text: str) -> bool:
    return bool(MOVE_TOKEN_RE.match(text.strip()))


def build_client(settings: Settings, http_client: httpx.AsyncClient | None = None) -> AsyncOpenAI:
    # A missing key still builds a client; the upstream then rejects the call with 401.
    return AsyncOpenAI(
        api_key=settings.openai_api_key or MISSING_API_KEY,
        base_url=settings.openai_base_url,
        timeout=settings.upstream_timeout_s,
        max_retries=0,
        http_client=http_client,
    )


def extract_reply(completion) -> str | None:
    choices = getattr(completion, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None


async def request_move(client: AsyncOpenAI, model: str, moves: list[Move]) -> str:
    """Ask the model for the next move and return its trimmed reply.

    Raises EmptyReplyError when the completion has no content and TypeError
    when the upstream body was not a completion at all. openai SDK errors
    (status, timeout, connection) propagate unchanged.
    """
    completion = await client.chat.completions.create(
        model=model,
        messages=build_messages(moves),
    )
    if not isinstance(completion, ChatCompletion):
        raise TypeError(f"unexpected completion payload {completion!r:.200}")
    reply = extract_reply(completion)
    move = reply.strip() if reply else ""
    if not move:
        raise EmptyReplyError(completion)
    logger.debug("Model %s replied %r", model, move)
    return move
