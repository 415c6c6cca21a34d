"""Exception hierarchy for kdbx-key.

Library code raises these; the CLI maps them to exit codes.
"""


class KDBXError(Exception):
    """Base exception for KDBX operations."""


class ConfigurationError(KDBXError):
    """Raised when the database URL is missing a part or uses an unknown scheme."""


class SourceUnavailableError(KDBXError):
    """Raised when a local database file cannot be opened."""


class RemoteFetchError(KDBXError):
    """Raised when the object store does not return the database."""


class CredentialMissingError(KDBXError):
    """Raised when no password was supplied or the prompt was cancelled."""


class DecodeError(KDBXError):
    """Raised when the database stream cannot be decoded."""


class AuthenticationError(DecodeError):
    """Raised when database credentials are invalid."""


class EntryNotFoundError(KDBXError):
    """Raised when no entry carries the requested title."""


class FieldNotFoundError(EntryNotFoundError):
    """Raised when an entry exists but lacks the requested field."""
