"""
DecentraID Database Module
SQLite persistence for gasless identities, verification requests and audit events.

Every public method runs in its own connection and transaction, so the
service layer can be called from many threads at once. State transitions
are single conditional UPDATEs; the caller learns whether it won from the
returned flag.
"""

import sqlite3
from contextlib import contextmanager
from typing import Optional, Dict, Any, List

from decentraid.errors import ConflictError, PersistenceError


SCHEMA = """
    CREATE TABLE IF NOT EXISTS gasless_identities (
        share_handle TEXT PRIMARY KEY,
        did TEXT NOT NULL,
        encrypted_payload TEXT NOT NULL,
        content_handle TEXT NOT NULL,
        anchor_state TEXT NOT NULL DEFAULT 'PENDING',
        anchored_by TEXT,
        chain_tx_ref TEXT,
        access_count INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        anchored_at TEXT
    );

    CREATE TABLE IF NOT EXISTS verification_requests (
        request_id INTEGER PRIMARY KEY,
        verifier_did TEXT NOT NULL,
        holder_did TEXT NOT NULL,
        purpose TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        created_at TEXT NOT NULL,
        resolved_at TEXT
    );

    CREATE TABLE IF NOT EXISTS audit_events (
        id TEXT PRIMARY KEY,
        did TEXT NOT NULL,
        action TEXT NOT NULL,
        details TEXT NOT NULL,
        chain_tx_ref TEXT NOT NULL DEFAULT 'OFF-CHAIN',
        timestamp TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_audit_did ON audit_events(did);
    CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_events(timestamp);
"""


class Database:
    """SQLite-backed store with get / insert-unique / update-if semantics."""

    def __init__(self, db_path: str, timeout: float = 30.0):
        """
        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = db_path
        self.timeout = timeout

    def init_schema(self) -> None:
        """Create tables if they don't exist."""
        try:
            conn = self._connect()
            try:
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.executescript(SCHEMA)
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to initialize database: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def transaction(self):
        """
        Context manager for a write transaction.
        Takes the write lock up front, commits on success, rolls back on failure.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise PersistenceError(f"Database unavailable: {e}") from e

        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise PersistenceError(f"Database error: {e}") from e
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def _fetch_one(self, query: str, params: tuple) -> Optional[Dict[str, Any]]:
        try:
            conn = self._connect()
            try:
                row = conn.execute(query, params).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error: {e}") from e
        return dict(row) if row else None

    def _insert(self, table: str, row: Dict[str, Any]) -> None:
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        with self.transaction() as conn:
            try:
                conn.execute(
                    f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                    tuple(row.values())
                )
            except sqlite3.IntegrityError as e:
                # Only key collisions are worth retrying with a fresh id
                if "UNIQUE constraint failed" in str(e):
                    raise ConflictError(f"Duplicate key in {table}") from e
                raise PersistenceError(f"Constraint violation in {table}: {e}") from e

    # ============ Gasless identities ============

    def insert_gasless_identity(self, row: Dict[str, Any]) -> None:
        """Insert a new identity. Raises ConflictError if the share handle exists."""
        self._insert("gasless_identities", row)

    def get_gasless_identity(self, share_handle: str) -> Optional[Dict[str, Any]]:
        """Retrieve an identity by share handle."""
        return self._fetch_one(
            "SELECT * FROM gasless_identities WHERE share_handle = ?",
            (share_handle,)
        )

    def increment_access_count(self, share_handle: str) -> Optional[Dict[str, Any]]:
        """
        Atomically increment the access counter and read the updated record.

        Returns:
            The record after the increment, or None if the handle is unknown
        """
        with self.transaction() as conn:
            cursor = conn.execute(
                "UPDATE gasless_identities SET access_count = access_count + 1 "
                "WHERE share_handle = ?",
                (share_handle,)
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM gasless_identities WHERE share_handle = ?",
                (share_handle,)
            ).fetchone()
            return dict(row)

    def anchor_gasless_identity(
        self,
        share_handle: str,
        anchored_by: str,
        chain_tx_ref: str,
        anchored_at: str
    ) -> bool:
        """
        Move an identity from PENDING to ANCHORED.

        Returns:
            True if this call performed the transition
        """
        with self.transaction() as conn:
            cursor = conn.execute("""
                UPDATE gasless_identities
                SET anchor_state = 'ANCHORED', anchored_by = ?,
                    chain_tx_ref = ?, anchored_at = ?
                WHERE share_handle = ? AND anchor_state = 'PENDING'
            """, (anchored_by, chain_tx_ref, anchored_at, share_handle))
            return cursor.rowcount == 1

    # ============ Verification requests ============

    def insert_verification_request(self, row: Dict[str, Any]) -> None:
        """Insert a new request. Raises ConflictError if the request id exists."""
        self._insert("verification_requests", row)

    def get_verification_request(self, request_id: int) -> Optional[Dict[str, Any]]:
        """Retrieve a request by id."""
        return self._fetch_one(
            "SELECT * FROM verification_requests WHERE request_id = ?",
            (request_id,)
        )

    def update_verification_status(
        self,
        request_id: int,
        new_status: str,
        expected_status: str,
        resolved_at: str
    ) -> bool:
        """
        Set a request's status if it currently holds expected_status.

        Returns:
            True if this call performed the transition
        """
        with self.transaction() as conn:
            cursor = conn.execute("""
                UPDATE verification_requests
                SET status = ?, resolved_at = ?
                WHERE request_id = ? AND status = ?
            """, (new_status, resolved_at, request_id, expected_status))
            return cursor.rowcount == 1

    # ============ Audit events ============

    def insert_audit_event(self, row: Dict[str, Any]) -> None:
        """Append an audit event."""
        self._insert("audit_events", row)

    def list_audit_events(self, did: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        """Get audit events, newest first, optionally for one DID."""
        if did:
            query = """
                SELECT * FROM audit_events WHERE did = ?
                ORDER BY timestamp DESC, rowid DESC LIMIT ?
            """
            params = (did, limit)
        else:
            query = "SELECT * FROM audit_events ORDER BY timestamp DESC, rowid DESC LIMIT ?"
            params = (limit,)

        try:
            conn = self._connect()
            try:
                rows = conn.execute(query, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error: {e}") from e
        return [dict(row) for row in rows]
