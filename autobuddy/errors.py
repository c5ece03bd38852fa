"""Exception types raised by the record store, mapping and identity layers."""


class AutoBuddyError(Exception):
    """Base class for all application errors."""


class StoreError(AutoBuddyError):
    """The document store could not be read or written."""


class InvalidKeyError(AutoBuddyError, ValueError):
    """A document path segment (user id or plate) is not usable as a key."""


class RecordError(AutoBuddyError):
    """A stored record body does not have the vehicle shape."""


class AuthError(AutoBuddyError):
    """Registration or sign-in was rejected."""


class AuthNotReady(AutoBuddyError):
    """The auth context was read before its first session notification."""
