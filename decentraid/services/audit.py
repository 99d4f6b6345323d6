"""
DecentraID Audit Service
Append-only audit trail. Writes never fail the operation that emits them.
"""

import logging
import uuid
from typing import Optional, List

from decentraid.database import Database
from decentraid.models import AuditEvent, AuditAction, OFF_CHAIN, utc_now

logger = logging.getLogger(__name__)


class AuditLogger:
    """Records audit events and serves them back for display."""

    def __init__(self, database: Database):
        self.database = database

    def record(
        self,
        did: str,
        action: AuditAction,
        details: str,
        chain_tx_ref: str = OFF_CHAIN
    ) -> Optional[AuditEvent]:
        """
        Append an audit event.

        Failures are logged and swallowed.

        Returns:
            The stored event, or None if the write failed
        """
        try:
            event = AuditEvent(
                id=str(uuid.uuid4()),
                did=did,
                action=AuditAction(action).value,
                details=details,
                chain_tx_ref=chain_tx_ref or OFF_CHAIN,
                timestamp=utc_now()
            )
            self.database.insert_audit_event(event.to_row())
        except Exception:
            logger.exception(f"Audit log error for {action} - {did}")
            return None

        logger.info(f"[AUDIT] {event.action} - {did}")
        return event

    def recent(self, did: Optional[str] = None, limit: int = 100) -> List[AuditEvent]:
        """Get the latest audit events, newest first."""
        rows = self.database.list_audit_events(did=did, limit=limit)
        return [AuditEvent.from_row(row) for row in rows]
