from typing import Optional, Dict, Any


class WalletPassException(Exception):
    """Base exception for the wallet pass builder."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class CredentialError(WalletPassException):
    """Raised when service account key material cannot be read or parsed."""

    pass


class PreconditionError(WalletPassException):
    """Raised when a class-dependent operation runs before the class exists."""

    pass


class NotConfiguredError(WalletPassException):
    """Raised when signing is attempted before credentials are set."""

    pass
