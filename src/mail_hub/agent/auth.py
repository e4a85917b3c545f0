"""Detect authorization redirects and authorization-needed wording in agent output.

Agent output has no fixed schema, so detection runs over the serialized
whole response rather than a known field. Missing a real authorization link
is worse than opening an unrelated one, hence the looser second pass.
"""

from __future__ import annotations

import logging
import re

from mail_hub.agent.models import AgentResult

logger = logging.getLogger(__name__)

# Backslash is excluded so URLs inside double-encoded JSON stop at the escape.
_URL_CHARS = r"[^\s\"'<>\\]"

AUTH_URL_TOKENS = ("composio", "accounts.google.com", "oauth", "auth", "connect", "redirect")
LOOSE_AUTH_URL_TOKENS = ("auth", "oauth", "connect", "composio", "google.com")

AUTH_REQUIRED_PHRASES = (
    "authenticate",
    "authorize",
    "permission",
    "connect your",
    "not connected",
)
AUTH_ERROR_TOKENS = ("auth", "connect", "permission")

_AUTH_URL_RE = re.compile(
    rf"https?://{_URL_CHARS}*(?:{'|'.join(re.escape(t) for t in AUTH_URL_TOKENS)}){_URL_CHARS}*",
    re.IGNORECASE,
)
_LONG_URL_RE = re.compile(rf"https?://{_URL_CHARS}{{20,}}", re.IGNORECASE)


def find_auth_url(text: str | None) -> str | None:
    """Return the first URL in ``text`` that looks like an authorization link."""
    if not text:
        return None

    match = _AUTH_URL_RE.search(text)
    if match:
        return match.group(0)

    match = _LONG_URL_RE.search(text)
    if match:
        url = match.group(0)
        lowered = url.lower()
        if any(token in lowered for token in LOOSE_AUTH_URL_TOKENS):
            return url
    return None


def find_auth_url_in(result: AgentResult | dict | None) -> str | None:
    """Serialize the whole envelope and search it for an authorization link."""
    if result is None:
        return None
    if isinstance(result, dict):
        result = AgentResult.from_dict(result)
    url = find_auth_url(result.to_json())
    if url:
        logger.info(f"Authorization link found in agent response: {url[:80]}")
    return url


def mentions_authorization(text: str | None) -> bool:
    """True when free text says the mail account still needs authorizing."""
    if not text:
        return False
    lowered = text.lower()
    return any(phrase in lowered for phrase in AUTH_REQUIRED_PHRASES)


def error_suggests_authorization(text: str | None) -> bool:
    """True when an error string points at a missing connection or grant."""
    if not text:
        return False
    lowered = text.lower()
    return any(token in lowered for token in AUTH_ERROR_TOKENS)
