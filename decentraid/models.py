"""
DecentraID Domain Models
Records persisted by the custody service and the results its operations return.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any


class AnchorState(str, Enum):
    """On-chain status of a gasless identity. PENDING -> ANCHORED, once."""
    PENDING = "PENDING"
    ANCHORED = "ANCHORED"


class RequestStatus(str, Enum):
    """Consent workflow status of a verification request."""
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class AuditAction(str, Enum):
    """Known audit event kinds."""
    IDENTITY_CREATION = "IDENTITY_CREATION"
    IDENTITY_UPDATE = "IDENTITY_UPDATE"
    GASLESS_IDENTITY_CREATION = "GASLESS_IDENTITY_CREATION"
    IDENTITY_CLAIMED = "IDENTITY_CLAIMED"
    CREDENTIAL_ISSUANCE = "CREDENTIAL_ISSUANCE"
    ZK_VERIFICATION_SUCCESS = "ZK_VERIFICATION_SUCCESS"
    ZK_VERIFICATION_FAILURE = "ZK_VERIFICATION_FAILURE"
    VERIFICATION_REQUEST = "VERIFICATION_REQUEST"
    CONSENT_GRANTED = "CONSENT_GRANTED"
    VERIFICATION_SUCCESS = "VERIFICATION_SUCCESS"


OFF_CHAIN = "OFF-CHAIN"
PENDING_TX = "PENDING"


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass
class GaslessIdentity:
    """Off-chain identity record, retrievable only by its share handle."""
    share_handle: str
    did: str
    encrypted_payload: str  # Serialized envelope (hex iv : hex ciphertext)
    content_handle: str
    anchor_state: AnchorState = AnchorState.PENDING
    anchored_by: Optional[str] = None
    chain_tx_ref: Optional[str] = None
    access_count: int = 0
    created_at: str = ""
    anchored_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "GaslessIdentity":
        data = dict(row)
        data["anchor_state"] = AnchorState(data["anchor_state"])
        return cls(**data)

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["anchor_state"] = self.anchor_state.value
        return row


@dataclass
class VerificationRequest:
    """A verifier's request for selective disclosure from a holder."""
    request_id: int
    verifier_did: str
    holder_did: str
    purpose: str
    status: RequestStatus = RequestStatus.PENDING
    created_at: str = ""
    resolved_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "VerificationRequest":
        data = dict(row)
        data["status"] = RequestStatus(data["status"])
        return cls(**data)

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        row["status"] = self.status.value
        return row


@dataclass
class AuditEvent:
    """Append-only audit trail entry."""
    id: str
    did: str
    action: str
    details: str
    chain_tx_ref: str = OFF_CHAIN
    timestamp: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AuditEvent":
        return cls(**dict(row))

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GaslessIdentityCreated:
    """Result of creating a gasless identity."""
    share_handle: str
    shareable_link: str
    content_handle: str


@dataclass
class ClaimResult:
    """Result of anchoring a gasless identity."""
    new_did: str
    chain_tx_ref: str


@dataclass
class EncryptedIdentity:
    """Encrypted personal data and its content handle, not persisted."""
    content_handle: str
    encrypted_payload: str


@dataclass
class IssuedCredential:
    """Result of issuing a credential."""
    credential_id: str
    content_handle: str
    encrypted_payload: str
