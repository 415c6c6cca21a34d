"""Command-line interface for kdbx-key.

Command Line Interface to a local or remote keepass database.

Provides subcommands:
  list (ls)  - List the top-level groups and their entry titles
  get (g)    - Print a field (default: Password) of the named entry
  otp (o)    - Print the current one-time password of the named entry

The database location and credentials come from the environment:
  KEEPASSDB                 - url to the database (file:///path/db.kdbx or
                              s3://s3.example.com/bucket/path/db.kdbx);
                              omit it to pipe the database on stdin
  KEEPASSDB_KEYFILE         - path to the keyfile for the database
  KEEPASSDB_PASSWORD        - password for the database (otherwise prompted)
  KEEPASSDB_S3_ACCESS_KEY   - S3 access key (optional)
  KEEPASSDB_S3_SECRET_KEY   - S3 secret key (optional)
  KEY_LOG                   - set to "debug" for debug output

Exit codes:
    0 - Success
    1 - Entry or field not found, or the otp field is unusable
    2 - Database source unavailable or decode failed
    3 - Missing password or invalid configuration
"""

import argparse
import json
import logging
import sys

from kdbx_key.config import PASSWORD_ENV, Settings
from kdbx_key.exceptions import (
    ConfigurationError,
    CredentialMissingError,
    KDBXError,
)
from kdbx_key.otp import otp_code
from kdbx_key.reader import EntryDirectory, open_database

LOG_FORMAT = "%(asctime)s %(levelname)s %(module)s:%(lineno)d %(message)s"


def _configure_logging(debug: bool) -> logging.Logger:
    """Return the package logger, writing to stderr.

    Handlers from an earlier call are replaced so repeated ``main()`` calls
    pick up the current ``sys.stderr``.
    """
    log = logging.getLogger("kdbx_key")
    for handler in list(log.handlers):
        log.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if debug else logging.WARNING)
    return log


def _open_directory(settings: Settings, log: logging.Logger) -> EntryDirectory:
    """Open the database, exiting with code 2 or 3 on failure."""
    try:
        return open_database(settings, log=log)
    except (ConfigurationError, CredentialMissingError) as exc:
        log.error("%s", exc)
        sys.exit(3)
    except KDBXError as exc:
        log.error("%s", exc)
        sys.exit(2)


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def cmd_list(args, settings: Settings, log: logging.Logger) -> int:
    """Handle the 'list' subcommand."""
    directory = _open_directory(settings, log)

    if args.output == "json":
        groups = [
            {"group": group.name, "entries": list(group.titles)}
            for group in directory.list_groups()
        ]
        print(json.dumps(groups, indent=2))
        return 0

    for group in directory.list_groups():
        print(f"{group.name} ({group.entry_count})")
        for title in group.titles:
            print(f"  {title}")
    return 0


def cmd_get(args, settings: Settings, log: logging.Logger) -> int:
    """Handle the 'get' subcommand."""
    directory = _open_directory(settings, log)

    entry = directory.find_entry_by_title(args.name)
    if entry is None:
        log.error("entry not found: %s", args.name)
        return 1
    log.debug("found entry %s", args.name)

    value = directory.get_secret_field(entry, args.field)
    if value is None:
        log.error("field '%s' not found on entry %s", args.field, args.name)
        return 1

    sys.stdout.write(value)
    return 0


def cmd_otp(args, settings: Settings, log: logging.Logger) -> int:
    """Handle the 'otp' subcommand."""
    directory = _open_directory(settings, log)

    entry = directory.find_entry_by_title(args.name)
    if entry is None:
        log.error("entry not found: %s", args.name)
        return 1

    value = directory.get_secret_field(entry, args.field)
    if not value:
        log.error("field '%s' not found on entry %s", args.field, args.name)
        return 1

    code = otp_code(value)
    if code is None:
        log.error("field '%s' of entry %s is not a TOTP secret", args.field, args.name)
        return 1

    print(code)
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="key",
        description="Command Line Interface to a local or remote keepass database.",
        epilog=(
            "Environment: KEEPASSDB (file:// or s3:// url), KEEPASSDB_KEYFILE, "
            "KEEPASSDB_PASSWORD, KEEPASSDB_S3_ACCESS_KEY, "
            "KEEPASSDB_S3_SECRET_KEY, KEY_LOG=debug"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__import__('kdbx_key').__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write debug diagnostics to stderr (same as KEY_LOG=debug)",
    )
    parser.add_argument(
        "--password-env",
        default=PASSWORD_ENV,
        help=f"Environment variable holding the DB password (default: {PASSWORD_ENV})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # -- list --
    p_list = sub.add_parser(
        "list", aliases=["ls"], help="List all entries in the database"
    )
    p_list.add_argument(
        "-o",
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    p_list.set_defaults(func=cmd_list)

    # -- get --
    p_get = sub.add_parser(
        "get", aliases=["g"], help="Get an entry from the database"
    )
    p_get.add_argument("name", help="Title of the entry")
    p_get.add_argument(
        "--field",
        default="Password",
        help="Field to print (default: Password)",
    )
    p_get.set_defaults(func=cmd_get)

    # -- otp --
    p_otp = sub.add_parser(
        "otp", aliases=["o"], help="Generate a one time password for an entry"
    )
    p_otp.add_argument("name", help="Title of the entry")
    p_otp.add_argument(
        "--field",
        default="otp",
        help="Field holding the otpauth:// uri or base32 secret (default: otp)",
    )
    p_otp.set_defaults(func=cmd_otp)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env(password_env=args.password_env)
    log = _configure_logging(settings.debug or args.verbose)
    return args.func(args, settings, log)
