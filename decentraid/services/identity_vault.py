"""
DecentraID Identity Vault
Custody of encrypted identities and the gasless-identity state machine.

Lifecycle of a gasless identity:
    create_gasless -> PENDING --claim--> ANCHORED (once, irreversible)
    retrieve increments access_count on every successful read
"""

import logging
from typing import Any, Callable, Dict, Optional

from decentraid.database import Database
from decentraid.errors import (
    AlreadyAnchoredError,
    DecryptionError,
    NotFoundError,
    StoredDataError,
    ValidationError,
)
from decentraid.models import (
    AnchorState,
    AuditAction,
    ClaimResult,
    EncryptedIdentity,
    GaslessIdentity,
    GaslessIdentityCreated,
    PENDING_TX,
    utc_now,
)
from decentraid.services.audit import AuditLogger
from decentraid.services.encryption import EncryptionService
from decentraid.services.identifiers import generate_share_handle, insert_with_retry
from decentraid.services.ipfs import ContentAddresser

logger = logging.getLogger(__name__)


def derive_did(address: str) -> str:
    """DID for an on-chain address."""
    return f"did:eth:{address}"


def _require(value: Any, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")


def _require_personal_data(personal_data: Any, field_name: str = "personal_data") -> None:
    if not personal_data:
        raise ValidationError(f"{field_name} is required")
    if not isinstance(personal_data, dict):
        raise ValidationError(f"{field_name} must be an object")


class IdentityVault:
    """Creates, serves and anchors encrypted identities."""

    def __init__(
        self,
        database: Database,
        encryption: EncryptionService,
        addresser: ContentAddresser,
        audit: AuditLogger,
        share_link: Callable[[str], str],
        id_attempts: int = 5,
        handle_factory: Callable[[], str] = generate_share_handle
    ):
        self.database = database
        self.encryption = encryption
        self.addresser = addresser
        self.audit = audit
        self.share_link = share_link
        self.id_attempts = id_attempts
        self.handle_factory = handle_factory

    def _seal(self, personal_data: Dict[str, Any]) -> EncryptedIdentity:
        encrypted_payload = self.encryption.encrypt_json(personal_data)
        content_handle = self.addresser.address_of(encrypted_payload)
        return EncryptedIdentity(content_handle=content_handle, encrypted_payload=encrypted_payload)

    # ============ Wallet-held identities ============

    def create_encrypted(self, did: str, personal_data: Dict[str, Any]) -> EncryptedIdentity:
        """
        Encrypt personal data for a wallet holder without storing it.

        The holder keeps the encrypted payload and presents it later when
        consenting to a verification request.
        """
        _require(did, "did")
        _require_personal_data(personal_data)

        email = personal_data.get("email")
        if email and "@" not in str(email):
            raise ValidationError("Invalid email format")

        sealed = self._seal(personal_data)
        self.audit.record(did, AuditAction.IDENTITY_CREATION, "Encrypted payload generated")
        return sealed

    def update_encrypted(self, did: str, new_data: Dict[str, Any]) -> EncryptedIdentity:
        """Re-encrypt replacement personal data for a wallet holder."""
        _require(did, "did")
        _require_personal_data(new_data, "new_data")

        sealed = self._seal(new_data)
        self.audit.record(did, AuditAction.IDENTITY_UPDATE, "Identity metadata updated")
        return sealed

    # ============ Gasless identities ============

    def create_gasless(self, did: str, personal_data: Dict[str, Any]) -> GaslessIdentityCreated:
        """
        Create an identity held off-chain until a wallet claims it.

        Args:
            did: Owner DID at creation time (may be a placeholder)
            personal_data: Holder's personal data object

        Returns:
            Share handle, shareable link and content handle
        """
        _require(did, "did")
        _require_personal_data(personal_data)

        sealed = self._seal(personal_data)
        created_at = utc_now()

        def insert(share_handle: str) -> None:
            record = GaslessIdentity(
                share_handle=share_handle,
                did=did,
                encrypted_payload=sealed.encrypted_payload,
                content_handle=sealed.content_handle,
                anchor_state=AnchorState.PENDING,
                created_at=created_at,
            )
            self.database.insert_gasless_identity(record.to_row())

        share_handle = insert_with_retry(
            self.handle_factory, insert, self.id_attempts, label="share handle"
        )

        self.audit.record(
            did,
            AuditAction.GASLESS_IDENTITY_CREATION,
            "Identity created without blockchain tx"
        )
        logger.info(f"Gasless identity created for {did} ({sealed.content_handle})")

        return GaslessIdentityCreated(
            share_handle=share_handle,
            shareable_link=self.share_link(share_handle),
            content_handle=sealed.content_handle,
        )

    def retrieve(self, share_handle: str) -> Dict[str, Any]:
        """
        Retrieve and decrypt an identity by its share handle.

        Each successful call counts as one access. The stored payload never
        changes, so it is decrypted before the access is counted.
        """
        _require(share_handle, "share_handle")

        stored = self.database.get_gasless_identity(share_handle)
        if stored is None:
            raise NotFoundError("Identity not found")

        try:
            personal_data = self.encryption.decrypt_json(stored["encrypted_payload"])
        except DecryptionError as e:
            logger.error(f"Stored payload for {stored['content_handle']} is unreadable: {e.message}")
            raise StoredDataError("Stored identity payload cannot be decrypted") from e

        row = self.database.increment_access_count(share_handle)
        if row is None:
            raise NotFoundError("Identity not found")

        identity = GaslessIdentity.from_row(row)

        return {
            "share_handle": identity.share_handle,
            "did": identity.did,
            "personal_data": personal_data,
            "content_handle": identity.content_handle,
            "anchor_state": identity.anchor_state.value,
            "anchored_by": identity.anchored_by,
            "chain_tx_ref": identity.chain_tx_ref,
            "created_at": identity.created_at,
            "anchored_at": identity.anchored_at,
            "access_count": identity.access_count,
        }

    def claim(
        self,
        share_handle: str,
        claimant_address: str,
        chain_tx_ref: Optional[str] = None
    ) -> ClaimResult:
        """
        Anchor a gasless identity to the claimant's address.

        Args:
            share_handle: Handle from the shareable link
            claimant_address: Claimant's on-chain address
            chain_tx_ref: Transaction reference, "PENDING" if not yet known

        Returns:
            Derived DID and the stored transaction reference
        """
        _require(share_handle, "share_handle")
        _require(claimant_address, "claimant_address")

        row = self.database.get_gasless_identity(share_handle)
        if row is None:
            raise NotFoundError("Identity not found")

        tx_ref = chain_tx_ref or PENDING_TX
        anchored = self.database.anchor_gasless_identity(
            share_handle,
            anchored_by=claimant_address,
            chain_tx_ref=tx_ref,
            anchored_at=utc_now(),
        )
        if not anchored:
            raise AlreadyAnchoredError("Identity already anchored on-chain")

        new_did = derive_did(claimant_address)
        self.audit.record(
            new_did,
            AuditAction.IDENTITY_CLAIMED,
            f"Claimed gasless identity {row['content_handle']}",
            tx_ref
        )
        logger.info(f"Identity {row['content_handle']} anchored by {claimant_address}")

        return ClaimResult(new_did=new_did, chain_tx_ref=tx_ref)
