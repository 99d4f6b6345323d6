"""
DecentraID Identity API
Encrypted identity creation and the gasless share / claim flow.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from decentraid.dependencies import get_services
from decentraid.services import Services


router = APIRouter()


class CreateIdentityRequest(BaseModel):
    """Identity creation request model."""
    did: str
    personal_data: Dict[str, Any]


class UpdateIdentityRequest(BaseModel):
    """Identity update request model."""
    did: str
    new_data: Dict[str, Any]


class EncryptedIdentityResponse(BaseModel):
    """Encrypted identity response model."""
    success: bool
    content_handle: str
    encrypted_payload: str


class GaslessIdentityResponse(BaseModel):
    """Gasless identity creation response model."""
    success: bool
    share_handle: str
    shareable_link: str
    content_handle: str
    message: str


class SharedIdentityResponse(BaseModel):
    """Shared identity response model."""
    success: bool
    did: str
    personal_data: Any
    content_handle: str
    anchor_state: str
    anchored_by: Optional[str] = None
    chain_tx_ref: Optional[str] = None
    created_at: str
    anchored_at: Optional[str] = None
    access_count: int


class ClaimIdentityRequest(BaseModel):
    """Claim request model."""
    share_handle: str
    claimant_address: str
    chain_tx_ref: Optional[str] = None


class ClaimIdentityResponse(BaseModel):
    """Claim response model."""
    success: bool
    new_did: str
    chain_tx_ref: str
    message: str


@router.post("/identity/create", response_model=EncryptedIdentityResponse)
def create_identity(body: CreateIdentityRequest, services: Services = Depends(get_services)):
    """
    Encrypt personal data for a wallet holder.

    The encrypted payload is returned to the holder and is not stored.
    """
    sealed = services.vault.create_encrypted(body.did, body.personal_data)
    return EncryptedIdentityResponse(
        success=True,
        content_handle=sealed.content_handle,
        encrypted_payload=sealed.encrypted_payload
    )


@router.put("/identity/update", response_model=EncryptedIdentityResponse)
def update_identity(body: UpdateIdentityRequest, services: Services = Depends(get_services)):
    """Re-encrypt updated personal data."""
    sealed = services.vault.update_encrypted(body.did, body.new_data)
    return EncryptedIdentityResponse(
        success=True,
        content_handle=sealed.content_handle,
        encrypted_payload=sealed.encrypted_payload
    )


@router.post("/identity/create-gasless", response_model=GaslessIdentityResponse)
def create_gasless_identity(body: CreateIdentityRequest, services: Services = Depends(get_services)):
    """Create an identity without a blockchain transaction."""
    created = services.vault.create_gasless(body.did, body.personal_data)
    return GaslessIdentityResponse(
        success=True,
        share_handle=created.share_handle,
        shareable_link=created.shareable_link,
        content_handle=created.content_handle,
        message="Identity created successfully! Share this link to transfer ownership."
    )


@router.get("/identity/share/{share_handle}", response_model=SharedIdentityResponse)
def get_shared_identity(share_handle: str, services: Services = Depends(get_services)):
    """Retrieve identity details by share handle."""
    view = services.vault.retrieve(share_handle)
    view.pop("share_handle")
    return SharedIdentityResponse(success=True, **view)


@router.post("/identity/claim", response_model=ClaimIdentityResponse)
def claim_identity(body: ClaimIdentityRequest, services: Services = Depends(get_services)):
    """Claim and anchor a gasless identity on-chain."""
    result = services.vault.claim(body.share_handle, body.claimant_address, body.chain_tx_ref)
    return ClaimIdentityResponse(
        success=True,
        new_did=result.new_did,
        chain_tx_ref=result.chain_tx_ref,
        message="Identity successfully anchored on blockchain"
    )
