"""Environment configuration for kdbx-key.

All settings come from environment variables so that the database password
never has to appear on the command line:

  KEEPASSDB                 - url to the database (file:///path or s3://host/bucket/key)
  KEEPASSDB_KEYFILE         - path to the keyfile for the database
  KEEPASSDB_PASSWORD        - password for the database (skips the prompt)
  KEEPASSDB_S3_ACCESS_KEY   - optional S3 access key
  KEEPASSDB_S3_SECRET_KEY   - optional S3 secret key
  KEY_LOG                   - set to "debug" for debug diagnostics
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DATABASE_URL_ENV = "KEEPASSDB"
KEYFILE_ENV = "KEEPASSDB_KEYFILE"
PASSWORD_ENV = "KEEPASSDB_PASSWORD"
S3_ACCESS_KEY_ENV = "KEEPASSDB_S3_ACCESS_KEY"
S3_SECRET_KEY_ENV = "KEEPASSDB_S3_SECRET_KEY"
LOG_ENV = "KEY_LOG"


@dataclass(frozen=True)
class Settings:
    """Configuration read once per invocation."""

    database_url: str = ""
    keyfile: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = field(default=None, repr=False)
    debug: bool = False

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        password_env: str = PASSWORD_ENV,
    ) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Empty values count as unset.
        """
        if environ is None:
            environ = os.environ
        return cls(
            database_url=environ.get(DATABASE_URL_ENV, "").strip(),
            keyfile=environ.get(KEYFILE_ENV) or None,
            password=environ.get(password_env) or None,
            s3_access_key=environ.get(S3_ACCESS_KEY_ENV) or None,
            s3_secret_key=environ.get(S3_SECRET_KEY_ENV) or None,
            debug=environ.get(LOG_ENV, "").lower() == "debug",
        )

    @property
    def has_s3_credentials(self) -> bool:
        return bool(self.s3_access_key and self.s3_secret_key)
