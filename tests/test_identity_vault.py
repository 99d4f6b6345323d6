import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from decentraid.errors import (
    AlreadyAnchoredError,
    ExhaustedRetriesError,
    NotFoundError,
    StoredDataError,
    ValidationError,
)
from decentraid.services.encryption import EncryptionService
from decentraid.services.identity_vault import IdentityVault

ADA = {"name": "Ada", "email": "ada@x.com"}


def test_create_and_retrieve(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)

    assert re.fullmatch(r"[0-9a-f]{32}", created.share_handle)
    assert created.shareable_link == f"http://frontend.test/import/{created.share_handle}"
    assert created.content_handle.startswith("Qm")
    assert len(created.content_handle) == 46

    first = services.vault.retrieve(created.share_handle)
    assert first["personal_data"] == ADA
    assert first["did"] == "did:eth:0xABC"
    assert first["content_handle"] == created.content_handle
    assert first["anchor_state"] == "PENDING"
    assert first["anchored_by"] is None
    assert first["anchored_at"] is None
    assert first["access_count"] == 1

    second = services.vault.retrieve(created.share_handle)
    assert second["access_count"] == 2


def test_content_handle_addresses_stored_envelope(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)
    row = services.database.get_gasless_identity(created.share_handle)
    assert services.addresser.address_of(row["encrypted_payload"]) == created.content_handle
    assert "Ada" not in row["encrypted_payload"]


@pytest.mark.parametrize("did, data", [
    (None, ADA),
    ("", ADA),
    ("   ", ADA),
    ("did:eth:0xABC", None),
    ("did:eth:0xABC", {}),
    ("did:eth:0xABC", "not an object"),
])
def test_create_requires_inputs(services, did, data):
    with pytest.raises(ValidationError):
        services.vault.create_gasless(did, data)


def test_retrieve_unknown_handle(services):
    with pytest.raises(NotFoundError):
        services.vault.retrieve("0" * 32)


def test_unreadable_payload_is_not_counted(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)
    rotated = IdentityVault(
        services.database,
        EncryptionService(bytes(32)),
        services.addresser,
        services.audit,
        share_link=services.config.get_share_link,
    )

    with pytest.raises(StoredDataError):
        rotated.retrieve(created.share_handle)
    assert services.database.get_gasless_identity(created.share_handle)["access_count"] == 0

    assert services.vault.retrieve(created.share_handle)["access_count"] == 1


def test_claim_then_reclaim(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)

    result = services.vault.claim(created.share_handle, "0xDEF")
    assert result.new_did == "did:eth:0xDEF"
    assert result.chain_tx_ref == "PENDING"

    with pytest.raises(AlreadyAnchoredError):
        services.vault.claim(created.share_handle, "0x111")
    with pytest.raises(AlreadyAnchoredError):
        services.vault.claim(created.share_handle, "0xDEF", "0xtx")

    view = services.vault.retrieve(created.share_handle)
    assert view["anchor_state"] == "ANCHORED"
    assert view["anchored_by"] == "0xDEF"
    assert view["chain_tx_ref"] == "PENDING"
    assert view["anchored_at"] is not None


def test_claim_records_tx_ref(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)
    result = services.vault.claim(created.share_handle, "0xDEF", "0xfeed")
    assert result.chain_tx_ref == "0xfeed"

    [event] = services.audit.recent(did="did:eth:0xDEF")
    assert event.action == "IDENTITY_CLAIMED"
    assert event.chain_tx_ref == "0xfeed"
    assert created.share_handle not in event.details


def test_claim_unknown_handle(services):
    with pytest.raises(NotFoundError):
        services.vault.claim("f" * 32, "0xDEF")


@pytest.mark.parametrize("handle, address", [("", "0xDEF"), ("a" * 32, ""), (None, "0xDEF")])
def test_claim_requires_inputs(services, handle, address):
    with pytest.raises(ValidationError):
        services.vault.claim(handle, address)


def test_concurrent_retrieves_count_every_access(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)
    n = 25

    with ThreadPoolExecutor(max_workers=8) as pool:
        views = list(pool.map(lambda _: services.vault.retrieve(created.share_handle), range(n)))

    assert sorted(v["access_count"] for v in views) == list(range(1, n + 1))
    assert services.database.get_gasless_identity(created.share_handle)["access_count"] == n


def test_concurrent_claims_have_one_winner(services):
    created = services.vault.create_gasless("did:eth:0xABC", ADA)

    def attempt(i):
        try:
            return services.vault.claim(created.share_handle, f"0x{i:040x}")
        except AlreadyAnchoredError:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(12)))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    row = services.database.get_gasless_identity(created.share_handle)
    assert winners[0].new_did == f"did:eth:{row['anchored_by']}"


def _vault_with_handles(services, handles, attempts=3):
    it = iter(handles)
    return IdentityVault(
        services.database,
        services.encryption,
        services.addresser,
        services.audit,
        share_link=services.config.get_share_link,
        id_attempts=attempts,
        handle_factory=lambda: next(it),
    )


def test_share_handle_collision_is_retried(services):
    taken = "a" * 32
    _vault_with_handles(services, [taken]).create_gasless("did:one", ADA)

    created = _vault_with_handles(services, [taken, taken, "b" * 32]).create_gasless("did:two", ADA)
    assert created.share_handle == "b" * 32
    assert services.vault.retrieve("b" * 32)["did"] == "did:two"
    assert services.vault.retrieve(taken)["did"] == "did:one"


def test_share_handle_collisions_exhaust(services):
    taken = "a" * 32
    _vault_with_handles(services, [taken]).create_gasless("did:one", ADA)

    with pytest.raises(ExhaustedRetriesError):
        _vault_with_handles(services, [taken] * 3).create_gasless("did:two", ADA)


def test_create_encrypted(services):
    sealed = services.vault.create_encrypted("did:eth:0xABC", ADA)
    assert services.encryption.decrypt_json(sealed.encrypted_payload) == ADA
    assert services.addresser.address_of(sealed.encrypted_payload) == sealed.content_handle

    [event] = services.audit.recent(did="did:eth:0xABC")
    assert event.action == "IDENTITY_CREATION"


def test_create_encrypted_rejects_bad_email(services):
    with pytest.raises(ValidationError):
        services.vault.create_encrypted("did:eth:0xABC", {"name": "Ada", "email": "nope"})


def test_update_encrypted(services):
    sealed = services.vault.update_encrypted("did:eth:0xABC", {"name": "Ada L."})
    assert services.encryption.decrypt_json(sealed.encrypted_payload) == {"name": "Ada L."}
    assert services.audit.recent(did="did:eth:0xABC")[0].action == "IDENTITY_UPDATE"


def test_audit_failure_does_not_fail_creation(services, monkeypatch):
    def broken(row):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(services.database, "insert_audit_event", broken)

    created = services.vault.create_gasless("did:eth:0xABC", ADA)
    assert services.vault.retrieve(created.share_handle)["personal_data"] == ADA
    assert services.vault.claim(created.share_handle, "0xDEF").new_did == "did:eth:0xDEF"
