"""Core KDBX database reading logic using pykeepass.

This module handles:
  - Decoding a database from an already opened byte source
  - Listing the top-level groups and their entry titles
  - Finding entries by exact title
  - Extracting password, username, URL, notes, and custom fields
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional

from pykeepass import PyKeePass
from pykeepass.exceptions import CredentialsError

from kdbx_key.config import Settings
from kdbx_key.credentials import CredentialBundle, build_credentials
from kdbx_key.exceptions import (
    AuthenticationError,
    DecodeError,
    EntryNotFoundError,
    FieldNotFoundError,
    KDBXError,
)
from kdbx_key.prompt import prompt_for_password
from kdbx_key.source import ByteSource, resolve_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupSummary:
    name: str
    entry_count: int
    titles: tuple[str, ...]


class EntryDirectory:
    """Read-only view over a decoded database.

    A directory starts out locked; :func:`load_database` unlocks it once
    the protected fields have been decrypted. Secret fields cannot be read
    while locked.
    """

    def __init__(self, kp: PyKeePass):
        self._kp = kp
        self._locked = True

    @property
    def locked(self) -> bool:
        return self._locked

    def unlock(self) -> None:
        """Mark protected fields as readable.

        Call only after pykeepass has decrypted the protected values; there
        is no way back to the locked state.
        """
        self._locked = False

    def groups(self) -> Iterator:
        """Yield the top-level groups in database order.

        These are the root group's direct subgroups, preceded by the root
        group itself when it holds entries directly.
        """
        root = self._kp.root_group
        if root.entries:
            yield root
        yield from root.subgroups

    def list_groups(self) -> Iterator[GroupSummary]:
        for group in self.groups():
            titles = tuple(entry.title or "" for entry in group.entries)
            yield GroupSummary(
                name=group.name or "", entry_count=len(titles), titles=titles
            )

    def find_entry_by_title(self, title: str):
        """Return the first entry whose title equals ``title``, or None.

        Entries sharing a title are not reported; the first one in group
        order wins.
        """
        for group in self.groups():
            for entry in group.entries:
                if entry.title == title:
                    return entry
        return None

    def get_secret_field(self, entry, field_name: str = "Password") -> Optional[str]:
        """Return a field of ``entry``, or None if the entry has no such field."""
        if self._locked:
            raise KDBXError("Database is locked; protected fields are unreadable")
        return _get_entry_attribute(entry, field_name)


def _get_entry_attribute(entry, attr: str) -> Optional[str]:
    """Return the requested attribute from a pykeepass Entry."""
    attr_lower = attr.lower()
    if attr_lower == "password":
        return entry.password
    elif attr_lower in ("username", "user"):
        return entry.username
    elif attr_lower == "url":
        return entry.url
    elif attr_lower == "notes":
        return entry.notes
    elif attr_lower == "title":
        return entry.title
    elif attr_lower == "otp":
        return entry.otp
    else:
        return entry.custom_properties.get(attr)


def _seekable(stream: BinaryIO) -> BinaryIO:
    # the KDBX header parser seeks back over what it has read
    try:
        if stream.seekable():
            return stream
    except (AttributeError, ValueError):
        pass
    return io.BytesIO(stream.read())


def load_database(
    source: ByteSource,
    credentials: CredentialBundle,
    *,
    log: Optional[logging.Logger] = None,
) -> EntryDirectory:
    """Decode ``source`` with ``credentials`` and unlock the result.

    The credentials are discarded once decoding finishes, whatever the
    outcome.

    Raises:
        AuthenticationError: If the credentials are invalid.
        DecodeError: For a corrupt, truncated or unsupported database.
    """
    log = log or logger
    try:
        log.debug("decode database from %s", source.origin)
        kp = PyKeePass(
            _seekable(source.stream),
            password=credentials.password,
            keyfile=credentials.keyfile,
            decrypt=True,
        )
    except CredentialsError:
        # Intentionally vague -- do NOT leak password or pykeepass internals
        raise AuthenticationError(
            "Failed to open database (wrong password or keyfile?)"
        ) from None
    except Exception as exc:
        raise DecodeError(f"Failed to decode database: {exc}") from exc
    finally:
        credentials.discard()

    log.debug("unlock entries")
    directory = EntryDirectory(kp)
    directory.unlock()
    return directory


def open_database(
    settings: Optional[Settings] = None,
    *,
    prompt: Callable[..., str] = prompt_for_password,
    stdin: Optional[BinaryIO] = None,
    log: Optional[logging.Logger] = None,
) -> EntryDirectory:
    """Resolve the source, gather credentials and load the database.

    Args:
        settings: Configuration. Defaults to the process environment.
        prompt: Called for the password when settings carry none.
        stdin: Stream to use in place of ``sys.stdin.buffer``.
        log: Diagnostics logger.

    Raises:
        ConfigurationError: If the database url is invalid.
        SourceUnavailableError: If the local database file cannot be opened.
        RemoteFetchError: If the object store request fails.
        CredentialMissingError: If no password was supplied.
        DecodeError: If the database cannot be decoded.
    """
    if settings is None:
        settings = Settings.from_env()
    log = log or logger

    with resolve_source(settings, stdin=stdin, log=log) as source:
        log.debug("construct credentials")
        credentials = build_credentials(
            settings.password, settings.keyfile, prompt=prompt, log=log
        )
        return load_database(source, credentials, log=log)


def get_entry(
    title: str,
    settings: Optional[Settings] = None,
    field: str = "Password",
    **kwargs,
) -> str:
    """Retrieve a single field of the entry titled ``title``.

    Args:
        title: Exact entry title.
        settings: Configuration. Defaults to the process environment.
        field: "Password" (default), "UserName", "URL", "Notes", "Title",
            or a custom field name.
        **kwargs: Passed on to :func:`open_database`.

    Raises:
        EntryNotFoundError: If no entry has the given title.
        FieldNotFoundError: If the entry lacks the field.
        KDBXError: For database errors.
    """
    directory = open_database(settings, **kwargs)

    entry = directory.find_entry_by_title(title)
    if entry is None:
        raise EntryNotFoundError(f"Entry not found: {title}")

    value = directory.get_secret_field(entry, field)
    if value is None:
        raise FieldNotFoundError(f"Field '{field}' not found on entry '{title}'")
    return value


def list_entries(settings: Optional[Settings] = None, **kwargs) -> list[GroupSummary]:
    """List the top-level groups with their entry titles, in database order."""
    directory = open_database(settings, **kwargs)
    return list(directory.list_groups())
