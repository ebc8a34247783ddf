import json

from matchmaking.domain import MatchCreatedEvent, MatchType
from matchmaking.services.events import LoggingNotifier, log_match_event


class FakeDB:
    def __init__(self):
        self.calls = []

    def execute(self, stmt, params):
        self.calls.append((str(stmt), params))


def _event():
    return MatchCreatedEvent(
        match_id="m-123",
        user_a_id="alice",
        user_b_id="bob",
        match_type=MatchType.TEAMMATE,
        icebreakers=("You both are skilled in python!",),
    )


def test_log_match_event_inserts_expected_payload_shape():
    db = FakeDB()
    log_match_event(db=db, event=_event())
    assert len(db.calls) == 1
    sql, params = db.calls[0]
    assert "INSERT INTO match_event" in sql
    assert params["event_type"] == "match_created"
    assert params["match_id"] == "m-123"
    payload = json.loads(params["payload"])
    assert payload["user_a"] == "alice"
    assert payload["match_type"] == "teammate"


def test_logging_notifier_logs_match(caplog):
    caplog.set_level("INFO")
    LoggingNotifier().notify_match_created(_event())
    assert "[MATCH] created match_id=m-123" in caplog.text
