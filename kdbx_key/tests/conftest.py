"""Fixture databases built at test time with pykeepass."""

import pytest
from pykeepass import create_database

PASSWORD = "correct horse battery staple"
OTP_SECRET = "JBSWY3DPEHPK3PXP"
OTP_URI = f"otpauth://totp/Mail:alice?secret={OTP_SECRET}&issuer=Mail"


@pytest.fixture
def database_path(tmp_path):
    """Groups Personal (Email, Bank) and Work (empty), in that order."""
    path = tmp_path / "fixture.kdbx"
    kp = create_database(str(path), password=PASSWORD)
    personal = kp.add_group(kp.root_group, "Personal")
    kp.add_group(kp.root_group, "Work")
    email = kp.add_entry(
        personal, "Email", "alice", "email-secret", url="https://mail.example.com"
    )
    email.set_custom_property("PIN", "4321")
    email.set_custom_property("Seed", OTP_SECRET)
    email.set_custom_property("BadSeed", "not a secret!")
    email.otp = OTP_URI
    kp.add_entry(personal, "Bank", "alice", "bank-secret")
    kp.save()
    return path


@pytest.fixture
def duplicate_path(tmp_path):
    """Two top-level groups that both hold an entry titled "Email"."""
    path = tmp_path / "duplicates.kdbx"
    kp = create_database(str(path), password=PASSWORD)
    current = kp.add_group(kp.root_group, "Current")
    archive = kp.add_group(kp.root_group, "Archive")
    kp.add_entry(current, "Email", "alice", "current-secret")
    kp.add_entry(archive, "Email", "alice", "archived-secret")
    nested = kp.add_group(current, "Nested")
    kp.add_entry(nested, "Deep", "bob", "deep-secret")
    kp.save()
    return path


@pytest.fixture
def keyfile_database(tmp_path):
    """A database that needs both the password and a keyfile."""
    keyfile = tmp_path / "db.key"
    keyfile.write_bytes(bytes(range(100)))
    path = tmp_path / "keyfile.kdbx"
    kp = create_database(str(path), password=PASSWORD, keyfile=str(keyfile))
    kp.add_entry(kp.root_group, "Server", "root", "server-secret")
    kp.save()
    return path, keyfile
