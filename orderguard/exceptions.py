"""
orderguard Exceptions

Custom exception classes for orderguard.
"""


class OrderGuardException(Exception):
    """Base exception for orderguard."""
    pass


class MalformedInputError(OrderGuardException, ValueError):
    """Input has the wrong shape (hash length, signature component length)."""
    pass


class InvalidKeyError(OrderGuardException):
    """Invalid cryptographic key."""
    pass


class InvalidAddressError(OrderGuardException, ValueError):
    """Invalid address format."""
    pass


class RpcError(OrderGuardException):
    """JSON-RPC node returned an error object."""

    def __init__(self, message: str, code: int = 0, data=None):
        super().__init__(message)
        self.code = code
        self.data = data


class ConfigurationError(OrderGuardException):
    """Configuration error."""
    pass
