"""Notification Helpers — post-commit publishing that can never undo a commit.

Invariants:
    - publish_all is called only after the store transaction closed successfully
    - A failing sink is logged and skipped; the remaining events are still attempted
"""

import logging
from collections.abc import Iterable

from stockhub.core.projections import ChangeEvent
from stockhub.core.repository_protocols import NotificationSink

logger = logging.getLogger(__name__)


class NullSink:
    """Sink used when no broadcaster is wired (scripts, tests)."""

    def publish(self, event: ChangeEvent) -> None:
        return None


def publish_all(sink: NotificationSink, events: Iterable[ChangeEvent]) -> None:
    for event in events:
        try:
            sink.publish(event)
        except Exception:
            logger.warning(
                "Change notification failed; mutation stays committed",
                exc_info=True,
                extra={"event": f"{event.entity.value}.{event.kind.value}"},
            )
