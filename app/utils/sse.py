"""
Server-Sent Events helpers for live queries.

Each stream owns a SubscriptionRegistry and releases it when the client goes
away, however the generator exits.
"""

from fastapi import Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from typing import Any, AsyncIterator, Callable
import asyncio
import json
import logging

from app.services.collection_sync import SubscriptionRegistry

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15.0

Push = Callable[[Any], None]
StartFn = Callable[[SubscriptionRegistry, Push], None]


def to_jsonable(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    if isinstance(payload, (list, tuple)):
        return [to_jsonable(item) for item in payload]
    return payload


def format_event(event: str, payload: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(to_jsonable(payload))}\n\n"


async def live_events(request: Request, event: str, start: StartFn) -> AsyncIterator[str]:
    """
    Run `start(registry, push)` and stream everything pushed as SSE messages.

    `push` may be called from any thread; payloads are handed to the event
    loop and written in the order they were pushed.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    registry = SubscriptionRegistry()

    def push(payload: Any) -> None:
        try:
            loop.call_soon_threadsafe(queue.put_nowait, payload)
        except RuntimeError:
            logger.debug(f"Dropped '{event}' update after stream shutdown")

    try:
        start(registry, push)
        while True:
            if await request.is_disconnected():
                break
            try:
                payload = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_event(event, payload)
    finally:
        registry.close()
        logger.debug(f"'{event}' stream closed")


def sse_response(request: Request, event: str, start: StartFn) -> StreamingResponse:
    """StreamingResponse over live_events() with the usual SSE headers."""
    return StreamingResponse(
        live_events(request, event, start),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
