import logging

from cagewatch.log_redact import SecretRedactionFilter, redact_text, redact_url


def test_redact_url_masks_client_secret():
    raw_url = (
        "https://id.twitch.tv/oauth2/token?client_id=abc"
        "&client_secret=s3cr3t&grant_type=client_credentials"
    )
    redacted = redact_url(raw_url)

    assert "client_id=abc" in redacted
    assert "grant_type=client_credentials" in redacted
    assert "client_secret=***" in redacted
    assert "s3cr3t" not in redacted


def test_redact_url_leaves_plain_urls_alone():
    url = "https://api.twitch.tv/helix/streams?user_login=leon"
    assert redact_url(url) == url


def test_redact_text_masks_bearer_and_json_tokens():
    message = 'Authorization: Bearer qwerty body={"access_token": "zzzz", "expires_in": 10}'
    redacted = redact_text(message)

    assert "Bearer ***" in redacted
    assert '"access_token": "***"' in redacted
    assert "qwerty" not in redacted
    assert "zzzz" not in redacted


def test_filter_masks_configured_literals():
    record = logging.LogRecord(
        name="unit-test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="status=%s",
        args=("Gift card code: GIFT-1234",),
        exc_info=None,
    )

    assert SecretRedactionFilter(("GIFT-1234", "")).filter(record) is True
    assert "GIFT-1234" not in record.msg
    assert record.msg == "status=Gift card code: ***"
    assert record.args == ()
