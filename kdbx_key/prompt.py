"""Masked password prompt.

The prompt renders on stderr and reads from the controlling terminal, so it
keeps working when stdin carries the database and stdout is piped into
another program.
"""

import logging
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.output import Output, create_output

logger = logging.getLogger(__name__)

PLACEHOLDER = "Password"


def _cancel_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("escape", eager=True)
    @bindings.add("c-c")
    def _cancel(event) -> None:
        event.app.exit(result="")

    return bindings


def _has_terminal() -> bool:
    for stream in (sys.stdin, sys.stdout, sys.stderr):
        try:
            if stream is not None and stream.isatty():
                return True
        except ValueError:
            # closed stream
            continue
    return False


def prompt_for_password(
    message: str = "Password: ",
    *,
    input: Optional[Input] = None,
    output: Optional[Output] = None,
    log: Optional[logging.Logger] = None,
) -> str:
    """Read a password with masked echo.

    Blocks until the user presses Enter (returns the typed value) or
    cancels with Escape, Ctrl-C or Ctrl-D (returns ``""``). An empty result
    means "no password supplied".

    Returns ``""`` straight away when there is no terminal to read from.
    """
    log = log or logger

    if input is None:
        if not _has_terminal():
            log.warning("no terminal available for the password prompt")
            return ""
        input = create_input(always_prefer_tty=True)
    if output is None:
        output = create_output(stdout=sys.stderr)

    session = PromptSession(
        message,
        is_password=True,
        placeholder=PLACEHOLDER,
        key_bindings=_cancel_bindings(),
        input=input,
        output=output,
    )
    try:
        value = session.prompt()
    except (KeyboardInterrupt, EOFError):
        log.debug("password prompt cancelled")
        return ""
    return value or ""
