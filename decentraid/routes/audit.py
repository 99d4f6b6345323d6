"""
DecentraID Audit API
Read-only view of the audit trail.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from decentraid.dependencies import get_services
from decentraid.services import Services


router = APIRouter()


class AuditEventResponse(BaseModel):
    """Single audit event."""
    id: str
    did: str
    action: str
    details: str
    chain_tx_ref: str
    timestamp: str


@router.get("/audit/logs", response_model=List[AuditEventResponse])
def get_audit_logs(
    did: Optional[str] = Query(None, description="Only events for this DID"),
    services: Services = Depends(get_services)
):
    """
    Get the latest audit events, newest first.

    Args:
        did: Optional Decentralized Identifier to filter by
    """
    events = services.audit.recent(did=did, limit=services.config.AUDIT_LOG_LIMIT)
    return [AuditEventResponse(**event.to_row()) for event in events]
