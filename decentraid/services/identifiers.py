"""
DecentraID Identifier Generation
Random share handles and request ids, inserted under a bounded retry.
"""

import logging
import secrets
from typing import Callable, TypeVar

from decentraid.errors import ConflictError, ExhaustedRetriesError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def generate_share_handle() -> str:
    """16 random bytes as 32 hex chars."""
    return secrets.token_hex(16)


def generate_request_id(low: int = 100000, high: int = 999999) -> int:
    """Random integer in [low, high)."""
    return low + secrets.randbelow(high - low)


def insert_with_retry(
    generate: Callable[[], T],
    insert: Callable[[T], None],
    attempts: int,
    label: str = "identifier"
) -> T:
    """
    Generate an identifier and insert the record that uses it.

    A ConflictError from insert means the identifier was taken; a new one
    is drawn, up to `attempts` tries in total.

    Returns:
        The identifier that was stored

    Raises:
        ExhaustedRetriesError: if every attempt collided
    """
    for attempt in range(1, attempts + 1):
        identifier = generate()
        try:
            insert(identifier)
            return identifier
        except ConflictError:
            logger.warning(f"[!] {label} collision on attempt {attempt}/{attempts}")

    raise ExhaustedRetriesError(f"Could not generate a unique {label} after {attempts} attempts")
