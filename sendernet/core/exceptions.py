"""
Plugin Exceptions
=================

ValidationError -- the operator supplied a credential the provider rejects.
ProviderError   -- sender.net could not be reached or answered with garbage.

A duplicate subscriber is an outcome, not an exception.
"""


class SenderNetError(Exception):
    """Base class for all sender.net plugin errors"""


class ValidationError(SenderNetError):
    """A settings value failed validation"""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field
        self.message = message


class ProviderError(SenderNetError):
    """Transport, timeout, HTTP 5xx or response parse failure"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
