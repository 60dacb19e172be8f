import json
import logging

from foodbank.infra.logging import RedactingJsonFormatter, clear_log_context, redact_pii, update_log_context


def _format(message: str, **extra) -> dict:
    record = logging.LogRecord("foodbank.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(RedactingJsonFormatter().format(record))


def test_redact_pii_masks_email_phone_and_tokens():
    text = redact_pii("pat@example.com called 555-123-4567 with Bearer abc.def.ghi")

    assert "pat@example.com" not in text
    assert "555-123-4567" not in text
    assert "abc.def.ghi" not in text


def test_formatter_redacts_client_fields_in_extra():
    payload = _format(
        "client_created",
        extra={"client_id": "c-1", "first_name": "Morgan", "dietary_restrictions": ["halal"]},
    )

    assert payload["message"] == "client_created"
    assert payload["client_id"] == "c-1"
    assert payload["first_name"] == "[REDACTED]"
    assert payload["dietary_restrictions"] == "[REDACTED]"


def test_formatter_includes_log_context():
    update_log_context(request_id="req-9", org_id="org-1", user_id=None)
    try:
        payload = _format("request")
    finally:
        clear_log_context()

    assert payload["request_id"] == "req-9"
    assert payload["org_id"] == "org-1"
    assert "user_id" not in payload
