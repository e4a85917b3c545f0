"""Reply copilot: draft reconciliation and the inbox/copilot controller."""

from mail_hub.copilot.controller import CopilotController
from mail_hub.copilot.models import ChatMessage, Draft, EmailItem
from mail_hub.copilot.reconciler import DraftReconciler, DraftState, merge_draft

__all__ = [
    "ChatMessage",
    "CopilotController",
    "Draft",
    "DraftReconciler",
    "DraftState",
    "EmailItem",
    "merge_draft",
]
