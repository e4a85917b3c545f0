"""Tests for the inbox/copilot controller."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from mail_hub.agent.models import AgentResult
from mail_hub.agent.session import SessionManager
from mail_hub.config import HubSettings
from mail_hub.copilot.controller import CopilotController
from mail_hub.copilot.models import EmailItem
from mail_hub.exceptions import AgentTransportError
from mail_hub.followups.models import FollowUpItem
from mail_hub.gmail.connection import ConnectionState, GmailConnection
from mail_hub.status import AgentActivity, StatusBoard

EMAIL_X = EmailItem("1", "thread_001", "Q4 Review", "Sarah <sarah@acme.com>", "Feedback please")
EMAIL_Y = EmailItem("2", "thread_002", "Partnership", "Mike <mike@cloud.io>", "Terms attached")


def ok(payload):
    return AgentResult(success=True, result=json.dumps(payload) if isinstance(payload, dict) else payload)


@pytest.fixture
def copilot():
    agent = MagicMock()
    agent.invoke = AsyncMock(return_value=ok({"draft_body": "Hi Sarah"}))
    sessions = SessionManager()
    status = StatusBoard()
    activity = AgentActivity()
    opener = MagicMock()
    connection = GmailConnection(agent, sessions, status, agent_id="copilot", opener=opener)
    copier = MagicMock(return_value=True)
    controller = CopilotController(
        agent, sessions, status, activity, connection, HubSettings(),
        agent_id="copilot", copier=copier,
    )
    return controller, agent, status, activity, connection, copier


def _session_ids(agent):
    return [c.args[2] for c in agent.invoke.call_args_list]


def test_open_copilot_requires_selection(copilot):
    controller, agent, *_ = copilot
    assert asyncio.run(controller.open_copilot()) is None
    agent.invoke.assert_not_called()


def test_open_copilot_generates_draft(copilot):
    controller, agent, status, activity, *_ = copilot
    controller.selected = EMAIL_X
    draft = asyncio.run(controller.open_copilot())
    assert controller.open
    assert draft.subject == "Re: Q4 Review"
    assert draft.body == "Hi Sarah"
    assert draft.tone == "professional"
    instruction = agent.invoke.call_args.args[0]
    assert instruction.startswith("Draft a professional reply")
    assert "Context: Feedback please" in instruction
    assert agent.invoke.call_args.args[1] == "copilot"
    assert activity.active_agent_id is None


def test_sessions_rotate_per_email_and_persist_across_chat(copilot):
    controller, agent, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    agent.invoke.return_value = ok({"message": "Sure."})
    asyncio.run(controller.send_chat("shorter please"))
    asyncio.run(controller.send_chat("and warmer"))
    controller.selected = EMAIL_Y
    asyncio.run(controller.open_copilot())

    draft_x, chat_1, chat_2, draft_y = _session_ids(agent)
    assert chat_1 == draft_x
    assert chat_2 == draft_x
    assert draft_y != draft_x


def test_regenerate_rotates_session(copilot):
    controller, agent, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    asyncio.run(controller.generate_draft())
    first, second = _session_ids(agent)
    assert first != second


def test_generate_failure_keeps_prior_draft(copilot):
    controller, agent, status, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    before = controller.draft
    agent.invoke.return_value = AgentResult(success=False, error="quota")
    assert asyncio.run(controller.generate_draft()) is None
    assert controller.draft == before
    assert status.current.text == "Failed to generate draft"
    assert not controller.reconciler.loading


def test_generate_transport_error(copilot):
    controller, agent, status, activity, *_ = copilot
    controller.selected = EMAIL_X
    agent.invoke.side_effect = AgentTransportError("down")
    assert asyncio.run(controller.open_copilot()) is None
    assert status.current.text == "Error generating draft"
    assert activity.active_agent_id is None
    assert not controller.reconciler.loading


def test_send_chat_ignores_blank(copilot):
    controller, agent, *_ = copilot
    assert asyncio.run(controller.send_chat("   ")) is None
    agent.invoke.assert_not_called()


def test_send_chat_refines_draft(copilot):
    controller, agent, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    agent.invoke.return_value = ok({"draft_body": "Hi Sarah, thanks!", "message": "Updated."})
    reply = asyncio.run(controller.send_chat("add thanks"))
    assert reply.content == "Updated."
    assert controller.draft.body == "Hi Sarah, thanks!"
    assert controller.draft.subject == "Re: Q4 Review"
    roles = [m.role for m in controller.transcript]
    assert roles == ["assistant", "user", "assistant"]


def test_send_reply_uses_edited_body(copilot):
    controller, agent, status, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    controller.reconciler.start_editing()
    controller.reconciler.update_edit("Edited body")
    agent.invoke.return_value = ok({"message": "Sent!", "status": "sent"})
    assert asyncio.run(controller.send_reply()) is True
    instruction = agent.invoke.call_args.args[0]
    assert "Body: Edited body" in instruction
    assert "thread_001" in instruction
    assert status.current.text == "Sent!"
    assert status.current.kind == "success"
    assert not controller.reconciler.editing


def test_send_reply_reports_agent_error(copilot):
    controller, agent, status, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    agent.invoke.return_value = ok({"message": "Could not send", "status": "error"})
    assert asyncio.run(controller.send_reply()) is False
    assert status.current.kind == "error"


def test_send_reply_envelope_failure(copilot):
    controller, agent, status, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    controller.reconciler.start_editing()
    agent.invoke.return_value = AgentResult(success=False, error="Gmail send quota exceeded")
    assert asyncio.run(controller.send_reply()) is False
    assert status.current.text == "Gmail send quota exceeded"
    assert status.current.kind == "error"
    assert controller.reconciler.editing


def test_send_reply_envelope_failure_without_error_text(copilot):
    controller, agent, status, *_ = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    agent.invoke.return_value = AgentResult(success=False)
    assert asyncio.run(controller.send_reply()) is False
    assert status.current.text == "Failed to send reply"


def test_send_reply_without_draft(copilot):
    controller, agent, *_ = copilot
    controller.selected = EMAIL_X
    assert asyncio.run(controller.send_reply()) is False
    agent.invoke.assert_not_called()


def test_copy_draft(copilot):
    controller, agent, status, activity, connection, copier = copilot
    controller.selected = EMAIL_X
    asyncio.run(controller.open_copilot())
    assert controller.copy_draft() is True
    copier.assert_called_once_with("Hi Sarah")
    assert controller.copied


def test_copy_failure_leaves_flag_off(copilot):
    controller, agent, status, activity, connection, copier = copilot
    copier.return_value = False
    assert controller.copy_draft() is False
    assert not controller.copied


def test_fetch_emails_marks_connected(copilot):
    controller, agent, status, activity, connection, _ = copilot
    agent.invoke.return_value = ok({"message": "You have 3 new emails", "thread_summary": "3 new"})
    assert asyncio.run(controller.fetch_emails()) is True
    assert agent.invoke.call_args.args[0] == "Fetch my recent emails from Gmail"
    assert connection.state is ConnectionState.CONNECTED
    assert controller.thread_content == "3 new"
    assert status.current.text == "You have 3 new emails"


def test_fetch_emails_search_query(copilot):
    controller, agent, *_ = copilot
    asyncio.run(controller.fetch_emails("invoices"))
    assert agent.invoke.call_args.args[0] == "Search my Gmail inbox for: invoices"


def test_fetch_emails_auth_url_short_circuits(copilot):
    controller, agent, status, activity, connection, _ = copilot
    agent.invoke.return_value = ok({"message": "Connect at https://composio.dev/connect/abc"})
    assert asyncio.run(controller.fetch_emails()) is False
    assert connection.state is ConnectionState.UNKNOWN
    connection._opener.assert_called_once_with("https://composio.dev/connect/abc")
    assert controller.fetching_emails is False


def test_fetch_emails_envelope_failure(copilot):
    controller, agent, status, *_ = copilot
    agent.invoke.return_value = AgentResult(success=False, error="Agent offline")
    assert asyncio.run(controller.fetch_emails()) is False
    assert status.current.text == "Agent offline"


def test_select_email_loads_thread(copilot):
    controller, agent, *_ = copilot
    agent.invoke.return_value = ok({"thread_summary": "Sarah wants feedback"})
    text = asyncio.run(controller.select_email(EMAIL_X))
    assert text == "Sarah wants feedback"
    assert controller.selected == EMAIL_X
    assert "thread ID: thread_001" in agent.invoke.call_args.args[0]


def test_failed_thread_fetch_does_not_leak_previous_thread(copilot):
    controller, agent, status, *_ = copilot
    agent.invoke.return_value = ok({"thread_summary": "X secret thread"})
    asyncio.run(controller.select_email(EMAIL_X))

    agent.invoke.return_value = AgentResult(success=False, error="Agent offline")
    assert asyncio.run(controller.select_email(EMAIL_Y)) == ""
    assert controller.thread_content == ""
    assert status.current.text == "Agent offline"
    assert status.current.kind == "error"

    agent.invoke.return_value = ok({"draft_body": "Hi Mike"})
    asyncio.run(controller.open_copilot())
    instruction = agent.invoke.call_args.args[0]
    assert 'Subject: "Partnership"' in instruction
    assert "Context: Terms attached" in instruction
    assert "X secret thread" not in instruction


def test_thread_fetch_transport_error_clears_thread(copilot):
    controller, agent, status, *_ = copilot
    agent.invoke.return_value = ok({"thread_summary": "X secret thread"})
    asyncio.run(controller.select_email(EMAIL_X))
    agent.invoke.side_effect = AgentTransportError("down")
    assert asyncio.run(controller.select_email(EMAIL_Y)) == ""
    assert status.current.text == "Error loading thread"


def test_refine_follow_up_seeds_without_remote_call(copilot):
    controller, agent, *_ = copilot
    item = FollowUpItem(
        email_subject="Invoice", sender="acct@vendor.com", thread_id="t5",
        reason="Overdue", draft_content="Paying today.",
    )
    draft = controller.refine_follow_up(item)
    agent.invoke.assert_not_called()
    assert controller.open
    assert controller.selected.thread_id == "t5"
    assert draft.subject == "Re: Invoice"
    assert draft.body == "Paying today."
    assert len(controller.transcript) == 1
