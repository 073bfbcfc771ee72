"""
Thin HTTP transport shared by the weather providers.

Responses are never cached: every forecast is a fresh request.
"""

import re
from typing import Any

import requests

from weather_forecast import __version__
from weather_forecast.logging_config import get_logger

logger = get_logger(__name__)

# Module-level singleton (tests can override/reset)
_SESSION: requests.Session | None = None

SENSITIVE_PARAMS = frozenset({"appid", "key", "api_key", "apikey", "token"})

_QUERY_STRING = re.compile(r"\?[^\s'\"()]*")


def mask_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Return a copy of query params safe to log (credentials masked)."""
    if not params:
        return {}
    return {
        key: "***" if key.lower() in SENSITIVE_PARAMS else value
        for key, value in params.items()
    }


def redact_error(error: BaseException, *secrets: str) -> str:
    """
    Error text safe to log or show.

    requests and urllib3 embed the full request URL in their messages, so
    query strings are dropped and any known secret is masked.
    """
    text = _QUERY_STRING.sub("?***", str(error))
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def _make_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = f"weather-forecast/{__version__}"
    return session


def get_session() -> requests.Session:
    """Get the shared session, creating it on first use."""
    global _SESSION
    if _SESSION is None:
        _SESSION = _make_session()
    return _SESSION


def reset_session() -> None:
    """Close and clear the module session (for tests)."""
    global _SESSION
    if _SESSION is not None:
        _SESSION.close()
    _SESSION = None


def set_session_for_tests(session: requests.Session) -> None:
    """Force get_session() to return a provided session (for tests)."""
    global _SESSION
    _SESSION = session


def request(
    method: str,
    url: str,
    session: requests.Session | None = None,
    **kwargs: Any,
) -> requests.Response:
    """
    Make an HTTP request through the given (or shared) session.

    Args:
        method: HTTP method
        url: Request URL
        session: Session to use; defaults to the module singleton
        **kwargs: Additional request parameters (params, timeout, ...)

    Returns:
        HTTP response

    Raises:
        requests.RequestException: On connection errors and timeouts
    """
    session = session or get_session()

    logger.debug(f"Making {method} request to {url} with params {mask_params(kwargs.get('params'))}")
    response = session.request(method, url, **kwargs)
    logger.debug(f"{method} {url} -> {response.status_code}")

    return response
