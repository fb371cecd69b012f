"""Secret redaction helpers for logging and URL safety."""

from __future__ import annotations

import logging
import re
import traceback
from urllib.parse import parse_qsl, quote_plus, urlsplit, urlunsplit

import httpx

SENSITIVE_QUERY_KEYS = frozenset(
    {
        "client-secret",
        "access-token",
        "refresh-token",
        "token",
        "code",
        "secret",
        "password",
    }
)
_SENSITIVE_KEY_PATTERN = r"(?:client_secret|access_token|refresh_token|token|secret|password)"
_URL_PATTERN = re.compile(r"(?i)https?://[^\s\"'<>]+")
_JSON_SECRET_PATTERN = re.compile(
    rf"(?i)(\"{_SENSITIVE_KEY_PATTERN}\"[ \t]*:[ \t]*\")([^\"]*)(\")"
)
_KV_SECRET_PATTERN = re.compile(
    rf"(?i)(\b{_SENSITIVE_KEY_PATTERN}\b[ \t]*[=:][ \t]*)([^&\s,;\"'<>]+)"
)
_BEARER_PATTERN = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._~+\-/]+=*")

_FILTER_LOGGERS = (
    "",
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "httpx",
    "httpcore",
    "cagewatch",
)
_HTTP_LOGGER = logging.getLogger("cagewatch.http")


def _is_sensitive_query_key(key: str) -> bool:
    return key.strip().lower().replace("_", "-") in SENSITIVE_QUERY_KEYS


def redact_url(url: str) -> str:
    """Mask sensitive query-param values in a URL and keep host/path visible."""
    try:
        parsed = urlsplit(url)
    except ValueError:
        return url
    if not parsed.query:
        return url

    pairs = parse_qsl(parsed.query, keep_blank_values=True)
    if not any(_is_sensitive_query_key(key) for key, _ in pairs):
        return url

    query = "&".join(
        f"{quote_plus(key)}={'***' if _is_sensitive_query_key(key) else quote_plus(value)}"
        for key, value in pairs
    )
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, query, parsed.fragment))


def redact_text(value: str | None, literals: tuple[str, ...] = ()) -> str | None:
    """Mask common secret formats, plus any exact ``literals``, in log text."""
    if value is None:
        return None
    text = str(value)

    for literal in literals:
        if literal:
            text = text.replace(literal, "***")
    text = _URL_PATTERN.sub(lambda match: redact_url(match.group(0)), text)
    text = _JSON_SECRET_PATTERN.sub(r"\1***\3", text)
    text = _KV_SECRET_PATTERN.sub(r"\1***", text)
    text = _BEARER_PATTERN.sub("Bearer ***", text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Logging filter that redacts secrets before records are emitted.

    ``literals`` holds configured secrets (the gift card code, the client
    secret) that have no recognisable shape of their own.
    """

    def __init__(self, literals: tuple[str, ...] = ()) -> None:
        super().__init__()
        self.literals = tuple(literal for literal in literals if literal)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            message = str(record.msg)

        record.msg = redact_text(message, self.literals) or ""
        record.args = ()
        if record.exc_info:
            exc_text = "".join(traceback.format_exception(*record.exc_info))
            record.exc_text = redact_text(exc_text, self.literals)
        return True


def _ensure_filter(logger: logging.Logger, redaction_filter: SecretRedactionFilter) -> None:
    for target in (logger, *logger.handlers):
        target.filters = [f for f in target.filters if not isinstance(f, SecretRedactionFilter)]
        target.addFilter(redaction_filter)


def install_log_redaction(literals: tuple[str, ...] = ()) -> None:
    """Install process-wide log redaction and quiet the raw httpx request lines."""
    redaction_filter = SecretRedactionFilter(literals)
    for logger_name in _FILTER_LOGGERS:
        _ensure_filter(logging.getLogger(logger_name), redaction_filter)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def _log_http_response(response: httpx.Response) -> None:
    request = response.request
    _HTTP_LOGGER.info(
        "Upstream %s %s status=%d",
        request.method,
        redact_url(str(request.url)),
        response.status_code,
    )


def httpx_event_hooks() -> dict[str, list]:
    return {"request": [], "response": [_log_http_response]}
