from enum import Enum
from typing import Any, Protocol

from common.logging import get_logger

logger = get_logger(__name__)


class EventType(str, Enum):
    STAGE_STARTED = "stage.started"
    STAGE_COMPLETED = "stage.completed"
    STAGE_FAILED = "stage.failed"
    ENRICHMENT_COMPLETED = "enrichment.completed"
    EMAIL_ENRICHMENT_COMPLETED = "enrichment.email.completed"
    DEDUP_STARTED = "dedup.started"
    DEDUP_GROUP_CONSOLIDATED = "dedup.group_consolidated"
    DEDUP_COMPLETED = "dedup.completed"
    LEAD_CLASSIFIED = "batch.lead_classified"


class EventSink(Protocol):
    def publish(self, event_type: EventType, event_data: dict[str, Any]) -> None: ...


class LoggingEventSink:
    """Writes progress milestones to the log."""

    def publish(self, event_type: EventType, event_data: dict[str, Any]) -> None:
        logger.debug(f"[Event] {event_type.value}: {event_data}")
