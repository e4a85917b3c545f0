"""Gmail connection state machine."""

from mail_hub.gmail.connection import ConnectionState, GmailConnection

__all__ = ["ConnectionState", "GmailConnection"]
