import json
import logging
import uuid

from sqlalchemy import text

from ..domain import MatchCreatedEvent

logger = logging.getLogger(__name__)

MATCH_CREATED = "match_created"


def log_match_event(db, event: MatchCreatedEvent, event_type: str = MATCH_CREATED) -> None:
    db.execute(
        text(
            """
            INSERT INTO match_event (id, match_id, event_type, payload)
            VALUES (:id, :match_id, :event_type, :payload)
            """
        ),
        {
            "id": str(uuid.uuid4()),
            "match_id": event.match_id,
            "event_type": event_type,
            "payload": json.dumps(event.to_payload()),
        },
    )


class LoggingNotifier:
    def notify_match_created(self, event: MatchCreatedEvent) -> None:
        logger.info(
            "[MATCH] created match_id=%s users=%s,%s match_type=%s",
            event.match_id,
            event.user_a_id,
            event.user_b_id,
            event.match_type.value,
        )

