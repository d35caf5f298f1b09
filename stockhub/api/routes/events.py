"""Change Event Stream — SSE feed of committed stock and exchange mutations.

Invariants:
    - Only committed changes are streamed (services publish after commit)
    - A comment line is sent when no event arrived within the keep-alive interval
    - The subscription is released when the client disconnects

Design Decisions:
    - One asyncio.Queue per connection, fed by EventBroadcaster from worker threads
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from stockhub.config import get_settings
from stockhub.core.projections import ChangeEvent
from stockhub.infrastructure.broadcast import EventBroadcaster, get_broadcaster

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events", tags=["events"])

# Prevent proxy/browser buffering of streamed events.
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}
_KEEPALIVE = ": keep-alive\n\n"


@router.get("")
async def stream_events(
    request: Request,
    broadcaster: EventBroadcaster = Depends(get_broadcaster),
):
    """SSE stream of change events (entity, kind, data)."""
    interval = get_settings().event_keepalive_seconds

    async def event_generator():
        async with broadcaster.subscribe() as queue:
            try:
                while not await request.is_disconnected():
                    try:
                        event = await asyncio.wait_for(queue.get(), interval)
                    except asyncio.TimeoutError:
                        yield _KEEPALIVE
                        continue
                    yield _sse_line(event)
            except asyncio.CancelledError:
                logger.info("Client disconnected from event stream")
                return

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


def _sse_line(event: ChangeEvent) -> str:
    """Format a change event as an SSE frame named after its entity and kind."""
    name = f"{event.entity.value}.{event.kind.value}"
    payload = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
    return f"event: {name}\ndata: {payload}\n\n"
