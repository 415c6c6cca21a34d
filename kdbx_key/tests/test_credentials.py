"""Tests for credential resolution."""

import pytest

from kdbx_key.credentials import CredentialBundle, build_credentials
from kdbx_key.exceptions import CredentialMissingError


def _never_prompt(**kwargs):
    raise AssertionError("prompt should not be called")


class TestBuildCredentials:
    def test_explicit_password_skips_prompt(self):
        creds = build_credentials("s3cret", prompt=_never_prompt)
        assert creds.password == "s3cret"
        assert creds.keyfile is None

    def test_prompt_used_without_explicit_password(self):
        creds = build_credentials(None, prompt=lambda **kwargs: "typed")
        assert creds.password == "typed"

    def test_empty_explicit_password_falls_back_to_prompt(self):
        creds = build_credentials("", prompt=lambda **kwargs: "typed")
        assert creds.password == "typed"

    def test_empty_prompt_result(self):
        with pytest.raises(CredentialMissingError):
            build_credentials(None, prompt=lambda **kwargs: "")

    def test_keyfile_passed_through_unchecked(self):
        creds = build_credentials(
            "pw", "/no/such/keyfile.key", prompt=_never_prompt
        )
        assert creds.keyfile == "/no/such/keyfile.key"


class TestCredentialBundle:
    def test_empty_password_rejected(self):
        with pytest.raises(CredentialMissingError):
            CredentialBundle("")

    def test_none_password_rejected(self):
        with pytest.raises(CredentialMissingError):
            CredentialBundle(None)

    def test_password_not_in_repr(self):
        creds = CredentialBundle("topsecret", "/keys/db.key")
        assert "topsecret" not in repr(creds)
        assert "/keys/db.key" in repr(creds)

    def test_discard(self):
        creds = CredentialBundle("topsecret", "/keys/db.key")
        creds.discard()
        assert creds.password is None
        assert creds.keyfile is None
