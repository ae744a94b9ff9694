"""
Error taxonomy for the storage facade.

Three kinds of failure matter to callers:
- ConfigurationError: something required was never configured
- CredentialError: a provider could not produce credentials
- DelegateError: the object store client itself failed
"""


class StorageSupportError(Exception):
    """Base class for all errors raised by this package."""
    pass


class ConfigurationError(StorageSupportError):
    """Raised when an operation needs configuration that is missing or invalid."""
    pass


class CredentialError(StorageSupportError):
    """
    Raised by credentials providers.
    
    The facade never lets this reach its callers. The credential probe
    turns it into a disabled state and a logged warning.
    """
    pass


class DelegateError(StorageSupportError):
    """
    Raised when the underlying object store client fails.
    
    The original SDK or OS exception is kept as __cause__.
    """
    pass
