from core.errors import admin_failure, describe_provider_error
from core.security import verify_admin_token
from tests.fakes import api_error


def test_provider_error_detail_stays_in_log_detail():
    report = describe_provider_error(api_error("rate limited", 429), "Sorry")

    assert report.public_message == "Sorry"
    assert "status=429" in report.log_detail
    assert "request_id=req_123" in report.log_detail
    assert "rate limited" in report.log_detail


def test_plain_exception_detail():
    report = describe_provider_error(ConnectionError("reset by peer"), "Sorry")

    assert report.log_detail == "ConnectionError: ConnectionError('reset by peer')"


def test_admin_failure_echoes_provider_message():
    assert admin_failure("Upload failed", api_error("file too large", 400)).public_message == (
        "Upload failed: file too large"
    )
    assert admin_failure("Status error", KeyError()).public_message == "Status error: KeyError"


def test_verify_admin_token():
    assert verify_admin_token("secret", "secret")
    assert not verify_admin_token("Secret", "secret")
    assert not verify_admin_token(None, "secret")
    assert not verify_admin_token("", "secret")
