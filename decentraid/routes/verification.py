"""
DecentraID Verification API
Verifier requests and holder consent with selective disclosure.
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from decentraid.dependencies import get_services
from decentraid.services import Services
from decentraid.services.consent import MAX_REQUEST_ID


router = APIRouter()


class VerificationRequestBody(BaseModel):
    """Verification request model."""
    verifier_did: str
    holder_did: str
    purpose: str


class VerificationRequestResponse(BaseModel):
    """Verification request creation response model."""
    success: bool
    request_id: int
    message: str


class VerificationStatusResponse(BaseModel):
    """Verification request status model."""
    request_id: int
    verifier_did: str
    holder_did: str
    purpose: str
    status: str
    created_at: str
    resolved_at: Optional[str] = None


class ConfirmVerificationBody(BaseModel):
    """Holder consent model."""
    request_id: int = Field(ge=0, lt=MAX_REQUEST_ID)
    holder_did: str
    encrypted_payload: str


class ConfirmVerificationResponse(BaseModel):
    """Disclosure response model."""
    success: bool
    disclosed_data: Any


@router.post("/verify/request", response_model=VerificationRequestResponse)
def create_verification_request(body: VerificationRequestBody, services: Services = Depends(get_services)):
    """Create a verification request from verifier to holder."""
    request_id = services.consent.request_verification(body.verifier_did, body.holder_did, body.purpose)
    return VerificationRequestResponse(
        success=True,
        request_id=request_id,
        message="Verification request initiated. Waiting for user consent."
    )


@router.get("/verify/request/{request_id}", response_model=VerificationStatusResponse)
def get_verification_request(
    request_id: int = Path(..., ge=0, lt=MAX_REQUEST_ID),
    services: Services = Depends(get_services)):
    """Get the status of a verification request."""
    request = services.consent.get_request(request_id)
    return VerificationStatusResponse(
        request_id=request.request_id,
        verifier_did=request.verifier_did,
        holder_did=request.holder_did,
        purpose=request.purpose,
        status=request.status.value,
        created_at=request.created_at,
        resolved_at=request.resolved_at
    )


@router.post("/verify/confirm", response_model=ConfirmVerificationResponse)
def confirm_verification(body: ConfirmVerificationBody, services: Services = Depends(get_services)):
    """
    Holder confirms a verification request.

    Only the fields the request's purpose calls for are returned to the verifier.
    """
    disclosed = services.consent.confirm_verification(body.request_id, body.holder_did, body.encrypted_payload)
    return ConfirmVerificationResponse(success=True, disclosed_data=disclosed)
