"""
DecentraID Error Taxonomy
Every error carries a stable machine-readable code so callers can tell
"retry with new input" from "retry verbatim" from "fatal".
"""


class DecentraIDError(Exception):
    """Base class for all service errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__.strip()
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serialize for API error responses."""
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable
        }


class ValidationError(DecentraIDError):
    """Missing or malformed required input."""
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(DecentraIDError):
    """Unknown share handle or request id."""
    code = "NOT_FOUND"
    status_code = 404


class AlreadyAnchoredError(DecentraIDError):
    """Identity already anchored on-chain."""
    code = "ALREADY_ANCHORED"
    status_code = 409


class RequestNotPendingError(DecentraIDError):
    """Verification request is no longer pending."""
    code = "REQUEST_NOT_PENDING"
    status_code = 409


class DecryptionError(DecentraIDError):
    """Ciphertext could not be decrypted."""
    code = "DECRYPTION_FAILED"
    status_code = 400


class InvalidPayloadError(DecentraIDError):
    """Encrypted payload is malformed or was sealed under another key."""
    code = "INVALID_PAYLOAD"
    status_code = 400


class InvalidProofError(DecentraIDError):
    """Invalid proof."""
    code = "INVALID_PROOF"
    status_code = 400


class ConflictError(DecentraIDError):
    """Generated identifier collided with an existing record."""
    code = "CONFLICT"
    status_code = 409
    retryable = True


class ExhaustedRetriesError(DecentraIDError):
    """Could not generate a unique identifier."""
    code = "EXHAUSTED_RETRIES"
    status_code = 503
    retryable = True


class PersistenceError(DecentraIDError):
    """Storage backend failure."""
    code = "PERSISTENCE_ERROR"
    status_code = 503
    retryable = True


class StoredDataError(DecentraIDError):
    """Stored record cannot be read back, e.g. after a key rotation."""
    code = "STORED_DATA_UNREADABLE"
    status_code = 500


class ConfigurationError(DecentraIDError):
    """Service is misconfigured."""
    code = "CONFIGURATION_ERROR"
    status_code = 500
