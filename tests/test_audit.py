"""Unit tests for provisioning audit logging."""

import json

import pytest

from scripts import audit


@pytest.fixture
def temp_audit_dir(monkeypatch, tmp_path):
    """Provide isolated audit directory for each test."""
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "provision-events.jsonl"

    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_file)

    # Set signing key for tests (loaded by _get_signing_key() from environment)
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    monkeypatch.delenv("AUDIT_LOG_SIGNING_KEY_FILE", raising=False)

    yield audit_dir, audit_file


def test_log_provision_event_creates_file(temp_audit_dir):
    """Test that logging creates the audit file."""
    _, audit_file = temp_audit_dir

    assert not audit_file.exists()

    audit.log_provision_event(
        "account_provision",
        "Acme",
        operator="admin",
        tenant="https://tenant.example.net",
        details={"account_id": "acc-1"},
        success=True,
    )

    assert audit_file.exists()
    assert audit_file.stat().st_mode & 0o777 == 0o600


def test_logged_event_fields(temp_audit_dir):
    """Test that logged events are valid JSON with the expected fields."""
    _, audit_file = temp_audit_dir

    audit.log_provision_event(
        "user_provision",
        "alice@example.com",
        operator="cli",
        tenant="https://tenant.example.net",
        details={"user_id": "user-1"},
    )

    event = json.loads(audit_file.read_text().splitlines()[0])

    assert event["event_type"] == "user_provision"
    assert event["target"] == "alice@example.com"
    assert event["tenant"] == "https://tenant.example.net"
    assert event["operator"] == "cli"
    assert event["success"] is True
    assert event["details"] == {"user_id": "user-1"}
    assert "timestamp" in event
    assert "signature" in event


def test_verify_audit_log_with_valid_signatures(temp_audit_dir):
    for i in range(3):
        audit.log_provision_event("account_provision", f"account-{i}", operator="test")

    assert audit.verify_audit_log() == (3, 3)


def test_verify_audit_log_detects_tampering(temp_audit_dir):
    """Test that signature verification detects tampered events."""
    _, audit_file = temp_audit_dir

    audit.log_provision_event("password_reset", "alice@example.com", operator="test")

    event = json.loads(audit_file.read_text())
    event["target"] = "mallory@example.com"
    audit_file.write_text(json.dumps(event) + "\n")

    assert audit.verify_audit_log() == (1, 0)


def test_signing_key_from_file(temp_audit_dir, monkeypatch, tmp_path):
    key_file = tmp_path / "audit_key"
    key_file.write_text("file-key\n")
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "")
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY_FILE", str(key_file))

    assert audit._get_signing_key() == b"file-key"


def test_log_event_without_signing_key(temp_audit_dir, monkeypatch):
    """Test logging when no signing key is configured."""
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "")
    _, audit_file = temp_audit_dir

    audit.log_provision_event("account_provision", "Acme")

    event = json.loads(audit_file.read_text())
    assert "signature" not in event


def test_failed_operation_is_recorded(temp_audit_dir):
    _, audit_file = temp_audit_dir

    audit.log_provision_event(
        "account_provision",
        "Acme",
        details={"error": "account is expired"},
        success=False,
    )

    event = json.loads(audit_file.read_text())
    assert event["success"] is False
    assert event["details"]["error"] == "account is expired"


def test_audit_directory_permissions(temp_audit_dir):
    audit_dir, _ = temp_audit_dir

    audit.log_provision_event("account_provision", "Acme")

    assert audit_dir.stat().st_mode & 0o777 == 0o700


def test_safe_log_never_raises(monkeypatch, capsys, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", blocker / "audit")
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", blocker / "audit" / "events.jsonl")

    assert audit.safe_log_provision_event("account_provision", "Acme") is False
    assert "Failed to log account_provision event for Acme" in capsys.readouterr().err


def test_verify_empty_audit_log(temp_audit_dir):
    assert audit.verify_audit_log() == (0, 0)
