"""Credential resolution for opening a database."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from kdbx_key.exceptions import CredentialMissingError
from kdbx_key.prompt import prompt_for_password

logger = logging.getLogger(__name__)


@dataclass
class CredentialBundle:
    """Password plus optional keyfile path, handed to the decoder once.

    The password never shows up in ``repr`` and is dropped by
    :meth:`discard` as soon as the decoder is done with it.
    """

    password: Optional[str] = field(repr=False)
    keyfile: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.password:
            raise CredentialMissingError("password is empty")

    def discard(self) -> None:
        self.password = None
        self.keyfile = None


def build_credentials(
    explicit_password: Optional[str] = None,
    keyfile: Optional[str] = None,
    *,
    prompt: Callable[..., str] = prompt_for_password,
    log: Optional[logging.Logger] = None,
) -> CredentialBundle:
    """Combine a password and an optional keyfile path.

    An explicit password (e.g. from KEEPASSDB_PASSWORD) is used as is;
    otherwise the user is prompted. The keyfile is passed through without
    validation, the decoder checks it.

    Raises:
        CredentialMissingError: If the password is empty, including when the
            prompt was cancelled.
    """
    log = log or logger

    if explicit_password:
        log.debug("using password from environment")
        password = explicit_password
    else:
        password = prompt(log=log)

    if not password:
        raise CredentialMissingError("No password supplied")

    if keyfile:
        log.debug("using keyfile %s", keyfile)
    return CredentialBundle(password=password, keyfile=keyfile)
