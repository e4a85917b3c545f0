"""Unified exception hierarchy for mail-hub."""


class MailHubError(Exception):
    """Base exception for all mail-hub errors."""


class ConfigurationError(MailHubError):
    """Missing endpoint, API key or other required setting."""


# Agent
class AgentError(MailHubError):
    """Base exception for conversational agent operations."""


class AgentTransportError(AgentError):
    """The agent call itself failed (network, timeout, unreadable body)."""


# Scheduler
class SchedulerError(MailHubError):
    """Base exception for scheduler operations."""


class SchedulerTransportError(SchedulerError):
    """The scheduler call itself failed."""


# Clipboard
class ClipboardError(MailHubError):
    """No clipboard command could accept the text."""
