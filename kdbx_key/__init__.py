"""kdbx-key - Command line access to a local or remote KeePass database.

Reads a KDBX database piped on stdin, stored in a local file, or fetched
from an S3-compatible object store, and lists its entries or prints an
entry's secret. Decoding is done in-process with pykeepass.
"""

__version__ = "0.1.0"

from kdbx_key.exceptions import (  # noqa: F401
    KDBXError,
    ConfigurationError,
    SourceUnavailableError,
    RemoteFetchError,
    CredentialMissingError,
    DecodeError,
    AuthenticationError,
    EntryNotFoundError,
    FieldNotFoundError,
)
from kdbx_key.reader import (  # noqa: F401
    EntryDirectory,
    GroupSummary,
    get_entry,
    list_entries,
    load_database,
    open_database,
)
from kdbx_key.source import resolve_source  # noqa: F401
from kdbx_key.credentials import build_credentials  # noqa: F401
from kdbx_key.config import Settings  # noqa: F401
from kdbx_key.cli import main  # noqa: F401
