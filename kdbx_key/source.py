"""Database source resolution.

The database bytes come from exactly one place per invocation, picked in
this order:

  1. standard input, when a size check shows bytes waiting on it
  2. the KEEPASSDB url: ``file://<path>`` or ``s3://<endpoint>/<bucket>/<key>``
  3. standard input anyway, when no url is configured
"""

import io
import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Union
from urllib.parse import urlsplit

from minio import Minio

from kdbx_key.config import Settings
from kdbx_key.exceptions import (
    ConfigurationError,
    RemoteFetchError,
    SourceUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StdinLocation:
    def describe(self) -> str:
        return "stdin"


@dataclass(frozen=True)
class FileLocation:
    path: str

    def describe(self) -> str:
        return f"local-file:{self.path}"


@dataclass(frozen=True)
class ObjectStoreLocation:
    endpoint: str
    bucket: str
    key: str

    def describe(self) -> str:
        return f"object-store:{self.bucket}/{self.key}"


SourceLocation = Union[StdinLocation, FileLocation, ObjectStoreLocation]


@dataclass
class ByteSource:
    """An open, forward-only binary stream and where it came from."""

    stream: BinaryIO
    origin: str


def parse_source_url(url: str) -> SourceLocation:
    """Parse a database url into a source location.

    Raises:
        ConfigurationError: For an unknown scheme, or an s3 url without
            bucket and object key.
    """
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise ConfigurationError(f"invalid database url: {exc}") from exc

    if parts.scheme == "file":
        # file://relative/path puts the first segment in the host slot
        path = f"{parts.netloc}{parts.path}"
        if not path:
            raise ConfigurationError("file url has no path")
        return FileLocation(path=path)

    if parts.scheme == "s3":
        if not parts.netloc:
            raise ConfigurationError("s3 url has no endpoint host")
        segments = parts.path.split("/")[1:]
        bucket = segments[0] if segments else ""
        key = "/".join(segments[1:])
        if not bucket or not key:
            raise ConfigurationError(
                "s3 url must look like s3://<endpoint>/<bucket>/<object key>"
            )
        return ObjectStoreLocation(endpoint=parts.netloc, bucket=bucket, key=key)

    raise ConfigurationError(f"unsupported database url scheme: {parts.scheme!r}")


def _stdin_size(stdin: BinaryIO) -> int:
    """Return the byte count reported for stdin without reading from it."""
    try:
        return os.fstat(stdin.fileno()).st_size
    except (AttributeError, OSError, ValueError):
        return 0


def locate_source(
    settings: Settings,
    stdin: Optional[BinaryIO] = None,
    log: Optional[logging.Logger] = None,
) -> SourceLocation:
    """Decide where the database bytes come from."""
    log = log or logger
    if stdin is None:
        stdin = sys.stdin.buffer

    if _stdin_size(stdin) > 0:
        log.debug("using database from stdin")
        return StdinLocation()

    if not settings.database_url:
        log.debug("no database url configured, reading stdin")
        return StdinLocation()

    location = parse_source_url(settings.database_url)
    log.debug("using database %s", location.describe())
    return location


def _object_store_client(
    location: ObjectStoreLocation, settings: Settings, log: logging.Logger
) -> Minio:
    if settings.has_s3_credentials:
        log.debug("using provided S3 credentials")
        return Minio(
            location.endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            secure=True,
        )
    log.debug("no S3 credentials provided")
    return Minio(location.endpoint, secure=True)


@contextmanager
def _open_object(
    location: ObjectStoreLocation, settings: Settings, log: logging.Logger
) -> Iterator[BinaryIO]:
    log.debug(
        "s3 host=%s bucket=%s key=%s",
        location.endpoint,
        location.bucket,
        location.key,
    )
    try:
        client = _object_store_client(location, settings, log)
        response = client.get_object(
            bucket_name=location.bucket, object_name=location.key
        )
    except Exception as exc:
        raise RemoteFetchError(
            f"Failed to fetch {location.bucket}/{location.key} "
            f"from {location.endpoint}: {exc}"
        ) from exc

    # the response body streams lazily; read all of it under the fetch guard
    try:
        body = io.BytesIO(response.read())
    except Exception as exc:
        raise RemoteFetchError(
            f"Failed to read {location.bucket}/{location.key} "
            f"from {location.endpoint}: {exc}"
        ) from exc
    finally:
        response.close()
        response.release_conn()

    with body:
        yield body


@contextmanager
def open_source(
    location: SourceLocation,
    settings: Settings,
    stdin: Optional[BinaryIO] = None,
    log: Optional[logging.Logger] = None,
) -> Iterator[ByteSource]:
    """Open ``location`` and yield it as a :class:`ByteSource`.

    Files and object store connections are released when the block exits.
    Standard input belongs to the process and is left open.

    Raises:
        SourceUnavailableError: If a local file cannot be opened.
        RemoteFetchError: If the object store request fails.
    """
    log = log or logger

    if isinstance(location, StdinLocation):
        if stdin is None:
            stdin = sys.stdin.buffer
        yield ByteSource(stdin, location.describe())
    elif isinstance(location, FileLocation):
        try:
            handle = open(location.path, "rb")
        except OSError as exc:
            raise SourceUnavailableError(
                f"Cannot open database file {location.path}: {exc.strerror}"
            ) from exc
        with handle:
            yield ByteSource(handle, location.describe())
    elif isinstance(location, ObjectStoreLocation):
        with _open_object(location, settings, log) as stream:
            yield ByteSource(stream, location.describe())
    else:
        raise ConfigurationError(f"unknown source location: {location!r}")


@contextmanager
def resolve_source(
    settings: Settings,
    *,
    stdin: Optional[BinaryIO] = None,
    log: Optional[logging.Logger] = None,
) -> Iterator[ByteSource]:
    """Locate and open the database source in one step."""
    location = locate_source(settings, stdin=stdin, log=log)
    with open_source(location, settings, stdin=stdin, log=log) as source:
        yield source
