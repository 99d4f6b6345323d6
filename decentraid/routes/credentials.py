"""
DecentraID Credential API
Credential issuance and proof checks.
"""

from typing import Any
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from decentraid.dependencies import get_services
from decentraid.services import Services


router = APIRouter()


class IssueCredentialRequest(BaseModel):
    """Credential issuance request model."""
    issuer_did: str
    holder_did: str
    credential_type: str
    data: Any


class IssueCredentialResponse(BaseModel):
    """Credential issuance response model."""
    success: bool
    credential_id: str
    content_handle: str
    encrypted_payload: str


class VerifyProofRequest(BaseModel):
    """Proof verification request model."""
    proof: str
    credential_id: str
    verifier_did: str


class VerifyProofResponse(BaseModel):
    """Proof verification response model."""
    success: bool
    message: str


@router.post("/credential/issue", response_model=IssueCredentialResponse)
def issue_credential(body: IssueCredentialRequest, services: Services = Depends(get_services)):
    """Issue a credential to a holder."""
    issued = services.credentials.issue(body.issuer_did, body.holder_did, body.credential_type, body.data)
    return IssueCredentialResponse(
        success=True,
        credential_id=issued.credential_id,
        content_handle=issued.content_handle,
        encrypted_payload=issued.encrypted_payload
    )


@router.post("/credential/verify-zkp", response_model=VerifyProofResponse)
def verify_zkp(body: VerifyProofRequest, services: Services = Depends(get_services)):
    """Check a zero-knowledge proof presented for a credential."""
    services.credentials.verify_proof(body.proof, body.credential_id, body.verifier_did)
    return VerifyProofResponse(success=True, message="Zero-Knowledge Proof Verified")
