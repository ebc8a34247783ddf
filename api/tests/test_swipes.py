import threading

import pytest

from matchmaking.domain import MatchType, canonical_key
from matchmaking.errors import InvalidArgument, NotFound, StoreUnavailable
from matchmaking.services.matchmaking import MatchmakingService
from matchmaking.services.memory_store import InMemoryMatchStore, InMemoryProfileAccessor, InMemorySwipeLedger
from matchmaking.services.state_machine import MATCHED, ONE_SIDED_A, ONE_SIDED_B


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify_match_created(self, event):
        self.events.append(event)


class FailingNotifier:
    def notify_match_created(self, event):
        raise RuntimeError("push gateway down")


class FailingLedger(InMemorySwipeLedger):
    def append_swipe(self, swipe):
        raise StoreUnavailable("swipe write failed; retry later")


def _service(notifier=None, ledger=None):
    profiles = InMemoryProfileAccessor(
        [
            {"user_id": "alice", "skills": ["python"], "interests": ["ai"], "role": "student", "seeking_cofounder": True},
            {"user_id": "bob", "skills": ["Python", "go"], "interests": ["AI"], "role": "professional", "seeking_cofounder": True},
            {"user_id": "carol", "skills": ["design"], "role": "organizer"},
        ]
    )
    return MatchmakingService(
        profiles=profiles,
        ledger=ledger or InMemorySwipeLedger(),
        matches=InMemoryMatchStore(),
        notifier=notifier or RecordingNotifier(),
    )


def test_self_swipe_is_rejected_before_any_write():
    svc = _service()
    with pytest.raises(InvalidArgument):
        svc.record_swipe("alice", "alice", "like", "cofounder")
    assert svc.ledger.history() == []


@pytest.mark.parametrize(
    "actor,target,action,match_type",
    [
        ("alice", "bob", "love", "cofounder"),
        ("alice", "bob", "like", "friend"),
        ("", "bob", "like", "cofounder"),
        ("alice", "  ", "like", "cofounder"),
    ],
)
def test_invalid_swipes(actor, target, action, match_type):
    svc = _service()
    with pytest.raises(InvalidArgument):
        svc.record_swipe(actor, target, action, match_type)


def test_unknown_target_is_not_found():
    svc = _service()
    with pytest.raises(NotFound):
        svc.record_swipe("alice", "nobody", "like", "teammate")


def test_one_sided_like_creates_no_match():
    svc = _service()
    result = svc.record_swipe("alice", "bob", "like", "cofounder")
    assert result.matched is False
    assert result.match_id is None
    assert result.state == ONE_SIDED_A
    assert svc.matches.count() == 0


def test_one_sided_state_is_relative_to_canonical_order():
    svc = _service()
    result = svc.record_swipe("bob", "alice", "super_like", "cofounder")
    assert result.state == ONE_SIDED_B


def test_reciprocal_likes_create_one_match_and_one_event():
    notifier = RecordingNotifier()
    svc = _service(notifier=notifier)

    first = svc.record_swipe("alice", "bob", "like", "cofounder")
    second = svc.record_swipe("bob", "alice", "super_like", "cofounder")

    assert first.matched is False
    assert second.matched is True
    assert second.state == MATCHED

    match = svc.matches.get_match(canonical_key("bob", "alice", MatchType.COFOUNDER))
    assert match.id == second.match_id
    assert (match.user_a_id, match.user_b_id) == ("alice", "bob")
    assert match.status == "matched"
    assert 1 <= len(match.icebreakers) <= 3
    assert match.icebreakers[0] == "You both are skilled in python!"

    assert len(notifier.events) == 1
    assert notifier.events[0].to_payload()["match_id"] == match.id


def test_match_types_are_independent():
    svc = _service()
    svc.record_swipe("alice", "bob", "like", "cofounder")
    result = svc.record_swipe("bob", "alice", "like", "teammate")
    assert result.matched is False


def test_latest_swipe_is_authoritative():
    svc = _service()
    svc.record_swipe("alice", "bob", "like", "cofounder")
    svc.record_swipe("alice", "bob", "pass", "cofounder")
    result = svc.record_swipe("bob", "alice", "like", "cofounder")
    assert result.matched is False
    assert len(svc.ledger.history()) == 3


def test_swipes_after_match_are_no_ops():
    notifier = RecordingNotifier()
    svc = _service(notifier=notifier)
    svc.record_swipe("alice", "bob", "like", "cofounder")
    matched = svc.record_swipe("bob", "alice", "like", "cofounder")

    repeat = svc.record_swipe("alice", "bob", "like", "cofounder")
    passed = svc.record_swipe("bob", "alice", "pass", "cofounder")

    assert repeat.match_id == matched.match_id
    assert passed.matched is True
    assert passed.match_id == matched.match_id
    assert svc.matches.count() == 1
    assert len(notifier.events) == 1


def test_concurrent_reciprocal_swipes_create_exactly_one_match():
    notifier = RecordingNotifier()
    svc = _service(notifier=notifier)
    n_threads = 50
    barrier = threading.Barrier(n_threads)
    results = []
    errors = []

    def fire(i):
        actor, target = ("alice", "bob") if i % 2 == 0 else ("bob", "alice")
        barrier.wait()
        try:
            results.append(svc.record_swipe(actor, target, "like", "cofounder"))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=fire, args=(i,)) for i in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert svc.matches.count() == 1
    assert len(notifier.events) == 1
    match_ids = {r.match_id for r in results if r.matched}
    assert match_ids == {notifier.events[0].match_id}


def test_ledger_failure_surfaces_and_leaves_no_match():
    svc = _service(ledger=FailingLedger())
    with pytest.raises(StoreUnavailable):
        svc.record_swipe("alice", "bob", "like", "cofounder")
    assert svc.matches.count() == 0


def test_notifier_failure_does_not_undo_match():
    svc = _service(notifier=FailingNotifier())
    svc.record_swipe("alice", "bob", "like", "cofounder")
    result = svc.record_swipe("bob", "alice", "like", "cofounder")
    assert result.matched is True
    assert svc.matches.count() == 1


class FlakyNotifier:
    def __init__(self, failures=1):
        self.failures = failures
        self.calls = 0
        self.events = []

    def notify_match_created(self, event):
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise RuntimeError("push gateway timeout")
        self.events.append(event)


def test_failed_event_is_redelivered_by_retried_swipe():
    notifier = FlakyNotifier()
    svc = _service(notifier=notifier)
    svc.record_swipe("alice", "bob", "like", "cofounder")
    first = svc.record_swipe("bob", "alice", "like", "cofounder")
    assert notifier.events == []
    assert svc.resolver.pending_deliveries() == {first.match_id}

    retry = svc.record_swipe("bob", "alice", "like", "cofounder")

    assert retry.match_id == first.match_id
    assert [e.match_id for e in notifier.events] == [first.match_id]
    assert svc.resolver.pending_deliveries() == set()

    svc.record_swipe("alice", "bob", "like", "cofounder")
    assert notifier.calls == 2
    assert len(notifier.events) == 1


def test_failed_event_is_redelivered_by_swipe_after_match():
    notifier = FlakyNotifier()
    svc = _service(notifier=notifier)
    svc.record_swipe("alice", "bob", "like", "cofounder")
    matched = svc.record_swipe("bob", "alice", "like", "cofounder")

    svc.record_swipe("alice", "bob", "pass", "cofounder")

    assert [e.match_id for e in notifier.events] == [matched.match_id]
