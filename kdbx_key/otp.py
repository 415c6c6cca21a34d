"""Time-based one-time passwords from an entry's otp field."""

from datetime import datetime
from typing import Optional, Union

import pyotp


def otp_code(
    value: str, for_time: Optional[Union[int, datetime]] = None
) -> Optional[str]:
    """Return the TOTP code for ``value``, or None if it is not usable.

    ``value`` is either an ``otpauth://`` uri or a bare base32 secret
    (SHA1, 6 digits, 30 second step). Spaces in a bare secret are ignored.
    """
    value = value.strip()
    try:
        if value.startswith("otpauth:"):
            totp = pyotp.parse_uri(value)
        else:
            totp = pyotp.TOTP(value.replace(" ", "").upper())
        if for_time is None:
            return totp.now()
        return totp.at(for_time)
    except (TypeError, ValueError):
        return None
