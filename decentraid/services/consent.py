"""
DecentraID Consent Broker
Verification-request workflow between a verifier and a holder.

    request_verification -> PENDING --confirm_verification--> VERIFIED
    REJECTED is terminal and set outside this service.
"""

import logging
from typing import Any, Callable, Optional

from decentraid.database import Database
from decentraid.errors import (
    DecryptionError,
    InvalidPayloadError,
    NotFoundError,
    RequestNotPendingError,
    ValidationError,
)
from decentraid.models import AuditAction, RequestStatus, VerificationRequest, utc_now
from decentraid.services.audit import AuditLogger
from decentraid.services.disclosure import DisclosureEngine
from decentraid.services.encryption import EncryptionService
from decentraid.services.identifiers import generate_request_id, insert_with_retry

logger = logging.getLogger(__name__)

# SQLite INTEGER upper bound, exclusive
MAX_REQUEST_ID = 2 ** 63


class ConsentBroker:
    """Opens verification requests and settles them with selective disclosure."""

    def __init__(
        self,
        database: Database,
        encryption: EncryptionService,
        audit: AuditLogger,
        disclosure: DisclosureEngine,
        request_id_range: tuple = (100000, 999999),
        id_attempts: int = 5,
        id_factory: Optional[Callable[[], int]] = None
    ):
        self.database = database
        self.encryption = encryption
        self.audit = audit
        self.disclosure = disclosure
        self.id_attempts = id_attempts
        low, high = request_id_range
        self.id_factory = id_factory or (lambda: generate_request_id(low, high))

    def request_verification(self, verifier_did: str, holder_did: str, purpose: str) -> int:
        """
        Open a verification request awaiting the holder's consent.

        Returns:
            The new request id
        """
        for value, name in ((verifier_did, "verifier_did"), (holder_did, "holder_did"), (purpose, "purpose")):
            if not value or not str(value).strip():
                raise ValidationError(f"{name} is required")

        created_at = utc_now()

        def insert(request_id: int) -> None:
            request = VerificationRequest(
                request_id=request_id,
                verifier_did=verifier_did,
                holder_did=holder_did,
                purpose=purpose,
                status=RequestStatus.PENDING,
                created_at=created_at,
            )
            self.database.insert_verification_request(request.to_row())

        request_id = insert_with_retry(
            self.id_factory, insert, self.id_attempts, label="request id"
        )

        self.audit.record(verifier_did, AuditAction.VERIFICATION_REQUEST, f"Requested data from {holder_did}")
        return request_id

    def get_request(self, request_id: int) -> VerificationRequest:
        """Look up a verification request."""
        if not isinstance(request_id, int) or not 0 <= request_id < MAX_REQUEST_ID:
            raise NotFoundError("Request not found")
        row = self.database.get_verification_request(request_id)
        if row is None:
            raise NotFoundError("Request not found")
        return VerificationRequest.from_row(row)

    def confirm_verification(self, request_id: int, holder_did: str, encrypted_payload: str) -> Any:
        """
        Holder consents: decrypt the payload, mark the request VERIFIED and
        return only what the request's purpose discloses.

        Args:
            request_id: Request being answered
            holder_did: Consenting holder
            encrypted_payload: Serialized envelope of the holder's data

        Returns:
            The disclosed data
        """
        if request_id is None or not holder_did or not encrypted_payload:
            raise ValidationError("request_id, holder_did, and encrypted_payload are required")

        request = self.get_request(request_id)

        try:
            data = self.encryption.decrypt_json(encrypted_payload)
        except DecryptionError as e:
            raise InvalidPayloadError(f"Invalid encrypted payload: {e.message}") from e

        if holder_did != request.holder_did:
            logger.warning(f"Request {request_id} confirmed by {holder_did}, addressed to {request.holder_did}")

        verified = self.database.update_verification_status(
            request_id,
            new_status=RequestStatus.VERIFIED.value,
            expected_status=RequestStatus.PENDING.value,
            resolved_at=utc_now(),
        )
        if not verified:
            raise RequestNotPendingError(f"Request {request_id} is no longer pending")

        self.audit.record(holder_did, AuditAction.CONSENT_GRANTED, f"Approved request {request_id}")

        disclosed_data = self.disclosure.filter(request.purpose, data)

        self.audit.record(request.verifier_did, AuditAction.VERIFICATION_SUCCESS, f"Identity verified for {holder_did}")
        return disclosed_data
