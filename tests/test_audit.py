import pytest

from decentraid.errors import ConflictError, PersistenceError
from decentraid.models import AuditAction


def test_record_and_recent(services):
    event = services.audit.record("did:one", AuditAction.IDENTITY_CREATION, "created")
    assert event.chain_tx_ref == "OFF-CHAIN"
    assert event.action == "IDENTITY_CREATION"

    services.audit.record("did:two", AuditAction.IDENTITY_CLAIMED, "claimed", "0xabc")

    events = services.audit.recent()
    assert [e.did for e in events] == ["did:two", "did:one"]
    assert events[0].chain_tx_ref == "0xabc"
    assert [e.id for e in services.audit.recent(did="did:one")] == [event.id]


def test_recent_limit(services):
    for i in range(5):
        services.audit.record("did:many", AuditAction.VERIFICATION_REQUEST, f"request {i}")
    events = services.audit.recent(did="did:many", limit=3)
    assert [e.details for e in events] == ["request 4", "request 3", "request 2"]


def test_write_failure_is_swallowed(services, monkeypatch):
    def broken(row):
        raise PersistenceError("disk full")

    monkeypatch.setattr(services.database, "insert_audit_event", broken)
    assert services.audit.record("did:one", AuditAction.IDENTITY_CREATION, "created") is None


def test_unknown_action_is_swallowed(services):
    assert services.audit.record("did:one", "NOT_AN_ACTION", "x") is None
    assert services.audit.recent() == []


def test_event_ids_are_unique(services):
    event = services.audit.record("did:one", AuditAction.IDENTITY_CREATION, "created")
    with pytest.raises(ConflictError):
        services.database.insert_audit_event(event.to_row())


def test_not_null_violation_is_not_a_conflict(services):
    event = services.audit.record("did:one", AuditAction.IDENTITY_CREATION, "created")
    row = event.to_row()
    row["id"] = "another-id"
    row["did"] = None
    with pytest.raises(PersistenceError) as exc_info:
        services.database.insert_audit_event(row)
    assert not isinstance(exc_info.value, ConflictError)
