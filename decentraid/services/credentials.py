"""
DecentraID Credential Service
Issues encrypted credentials and checks zero-knowledge proofs.

Proof checking is a placeholder: a proof longer than MIN_PROOF_LENGTH
characters is accepted. No circuit verification happens here.
"""

import logging
import secrets
from typing import Any

from decentraid.errors import InvalidProofError, ValidationError
from decentraid.models import AuditAction, IssuedCredential
from decentraid.services.audit import AuditLogger
from decentraid.services.encryption import EncryptionService
from decentraid.services.ipfs import ContentAddresser

logger = logging.getLogger(__name__)

MIN_PROOF_LENGTH = 50


class CredentialIssuer:
    """Issuer and verifier side of credentials."""

    def __init__(self, encryption: EncryptionService, addresser: ContentAddresser, audit: AuditLogger):
        self.encryption = encryption
        self.addresser = addresser
        self.audit = audit

    def issue(self, issuer_did: str, holder_did: str, credential_type: str, data: Any) -> IssuedCredential:
        """Encrypt credential data for a holder and address it."""
        if not issuer_did or not holder_did or not credential_type or not data:
            raise ValidationError("issuer_did, holder_did, credential_type, and data are required")

        encrypted_payload = self.encryption.encrypt_json(data)
        content_handle = self.addresser.address_of(encrypted_payload)

        self.audit.record(issuer_did, AuditAction.CREDENTIAL_ISSUANCE, f"Issued {credential_type} to {holder_did}")

        return IssuedCredential(
            credential_id=secrets.token_hex(32),
            content_handle=content_handle,
            encrypted_payload=encrypted_payload,
        )

    def verify_proof(self, proof: str, credential_id: str, verifier_did: str) -> bool:
        """
        Check a proof presented for a credential.

        Raises:
            InvalidProofError: if the proof is rejected
        """
        if not verifier_did:
            raise ValidationError("verifier_did is required")

        if proof and len(proof) > MIN_PROOF_LENGTH:
            self.audit.record(verifier_did, AuditAction.ZK_VERIFICATION_SUCCESS, f"Verified credential {credential_id}")
            return True

        self.audit.record(verifier_did, AuditAction.ZK_VERIFICATION_FAILURE, f"Failed verification for {credential_id}")
        logger.info(f"Proof rejected for credential {credential_id}")
        raise InvalidProofError("Invalid Proof")
