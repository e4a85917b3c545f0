"""Conversational agent client, envelope parsing and authorization detection."""

from mail_hub.agent.auth import (
    error_suggests_authorization,
    find_auth_url,
    find_auth_url_in,
    mentions_authorization,
)
from mail_hub.agent.client import AgentClient
from mail_hub.agent.models import AgentResult
from mail_hub.agent.parser import NoPayload, Structured, TextOnly, classify, parse_result
from mail_hub.agent.session import SessionManager, new_session_id

__all__ = [
    "AgentClient",
    "AgentResult",
    "NoPayload",
    "SessionManager",
    "Structured",
    "TextOnly",
    "classify",
    "error_suggests_authorization",
    "find_auth_url",
    "find_auth_url_in",
    "mentions_authorization",
    "new_session_id",
    "parse_result",
]
