"""Flows: prompt wiring, extraction and graceful degradation."""

import httpx
import pytest

from case_companion.constants import NOT_SPECIFIED, ROADMAP_FAILURE_NOTICE
from case_companion.core.types import CaseContext
from case_companion.exceptions import (
    ConfigurationMissingError,
    ErrorKind,
    NonSuccessStatusError,
)
from case_companion.flows import (
    CHATBOT_FALLBACK,
    DEVILS_ADVOCATE_FALLBACK,
    ChatReply,
    generate_case_analysis,
    generate_chatbot_reply,
    generate_cost_roadmap,
    generate_devils_advocate_reply,
    generate_points_summary,
    generate_presentation_outline,
    generate_strategy_snapshot,
)
from tests.fixtures.api_responses import (
    CASE_ANALYSIS_REPLY,
    POINTS_SUMMARY_REPLY,
    ROADMAP_REPLY_IN_PROSE,
    STRATEGY_SNAPSHOT_REPLY,
    completion_body,
)

pytestmark = pytest.mark.unit


class TestCaseAnalysis:
    @pytest.mark.asyncio
    async def test_extracts_every_field(self, make_client, case_context):
        client, endpoint = make_client(text=CASE_ANALYSIS_REPLY)
        analysis = await generate_case_analysis(case_context, client)

        assert analysis.ok
        assert analysis.estimated_cost == "₹1,50,000 - ₹3,00,000"
        assert analysis.expected_duration == "12-18 months"
        assert analysis.win_probability == 72.0
        assert analysis.loss_probability == 28.0
        assert analysis.strong_points.startswith("- Signed lease deed")
        assert "1. Witness availability" in analysis.weak_points

        system, user = endpoint.last_messages
        assert system["role"] == "system"
        assert "ESTIMATED COST (INR):" in system["content"]
        assert "Text Document Snippet: Lease deed signed on 1 March" in user["content"]

    @pytest.mark.asyncio
    async def test_failure_yields_sentinels_and_error(self, make_client, case_context):
        client, _ = make_client(status_code=500, body="internal error")
        analysis = await generate_case_analysis(case_context, client)

        assert isinstance(analysis.error, NonSuccessStatusError)
        assert analysis.estimated_cost == NOT_SPECIFIED
        assert analysis.win_probability == 0.0
        assert analysis.weak_points == NOT_SPECIFIED

    @pytest.mark.asyncio
    async def test_off_format_reply_is_not_an_error(self, make_client, case_context):
        client, _ = make_client(text="I am unable to assess this case.")
        analysis = await generate_case_analysis(case_context, client)
        assert analysis.ok
        assert analysis.expected_duration == NOT_SPECIFIED


class TestPointsAndStrategy:
    @pytest.mark.asyncio
    async def test_points_summary(self, make_client, case_context):
        client, _ = make_client(text=POINTS_SUMMARY_REPLY)
        summary = await generate_points_summary(case_context, client)
        assert summary.strong_items == ["Contract is registered", "Payment trail is complete"]
        assert summary.weak_items == ["Delay in filing"]

    @pytest.mark.asyncio
    async def test_strategy_snapshot(self, make_client, case_context):
        client, _ = make_client(text=STRATEGY_SNAPSHOT_REPLY)
        snapshot = await generate_strategy_snapshot(case_context, client)
        assert snapshot.opening_statement_hook.startswith("This case is about")
        assert snapshot.top_strengths.count("\n") == 2
        assert snapshot.top_weaknesses.count("\n") == 2

    @pytest.mark.asyncio
    async def test_presentation_outline_is_raw_text(self, make_client, case_context):
        client, _ = make_client(text="  Slide 1: Title\n- Sharma v. Verma\n")
        outline = await generate_presentation_outline(case_context, client)
        assert outline.outline == "Slide 1: Title\n- Sharma v. Verma"


class TestCostRoadmap:
    @pytest.mark.asyncio
    async def test_stages_are_parsed(self, make_client, case_context):
        client, _ = make_client(text=ROADMAP_REPLY_IN_PROSE)
        roadmap = await generate_cost_roadmap(case_context, client, clock=lambda: 42)
        assert roadmap.ok
        assert roadmap.notice is None
        assert [s.id for s in roadmap.stages] == ["stage-0-42", "stage-1-42"]

    @pytest.mark.asyncio
    async def test_uses_conversation_snippet_budget(self, make_client):
        long_doc = "data:text/plain;base64," + "YWFh" * 200  # "aaa" * 200
        case = CaseContext(documents=(long_doc,))
        client, endpoint = make_client(text="[]")
        await generate_cost_roadmap(case, client)
        user = endpoint.last_messages[-1]["content"]
        assert "a" * 300 + "..." in user
        assert "a" * 301 not in user

    @pytest.mark.asyncio
    async def test_bad_json_yields_notice(self, make_client, case_context):
        client, _ = make_client(text="Sorry, no roadmap today.")
        roadmap = await generate_cost_roadmap(case_context, client)
        assert roadmap.stages == ()
        assert roadmap.notice == ROADMAP_FAILURE_NOTICE
        assert roadmap.error.kind is ErrorKind.MALFORMED_JSON

    @pytest.mark.asyncio
    async def test_deeply_nested_reply_yields_notice(self, make_client, case_context):
        client, _ = make_client(text="[" * 100_000 + "]" * 100_000)
        roadmap = await generate_cost_roadmap(case_context, client)
        assert roadmap.stages == ()
        assert roadmap.notice == ROADMAP_FAILURE_NOTICE
        assert roadmap.error.kind is ErrorKind.MALFORMED_JSON

    @pytest.mark.asyncio
    async def test_schema_violation_yields_notice(self, make_client, case_context):
        client, _ = make_client(text='[{"stageName": "Filing"}]')
        roadmap = await generate_cost_roadmap(case_context, client)
        assert roadmap.stages == ()
        assert roadmap.notice == ROADMAP_FAILURE_NOTICE
        assert roadmap.error.kind is ErrorKind.SCHEMA_VIOLATION

    @pytest.mark.asyncio
    async def test_missing_key_yields_notice(self, make_client, case_context):
        client, endpoint = make_client(api_key=None)
        roadmap = await generate_cost_roadmap(case_context, client)
        assert isinstance(roadmap.error, ConfigurationMissingError)
        assert roadmap.notice == ROADMAP_FAILURE_NOTICE
        assert endpoint.requests == []


class TestChatFlows:
    @pytest.mark.asyncio
    async def test_chatbot_prompt_layout(self, make_client, case_context):
        client, endpoint = make_client(text="The next hearing is on 5 May.")
        history = [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello, how can I help?"},
            {"role": "user", "content": "When is the next hearing?"},
        ]
        reply = await generate_chatbot_reply(
            case_context, "When is the next hearing?", client, history=history
        )

        assert reply.reply == "The next hearing is on 5 May."
        roles = [m["role"] for m in endpoint.last_messages]
        assert roles == ["system", "user", "assistant", "user"]
        final = endpoint.last_messages[-1]["content"]
        assert final.startswith("User asks: When is the next hearing?")
        assert "Relevant Case Details (JSON format):" in final

    @pytest.mark.asyncio
    async def test_chatbot_falls_back_on_failure(self, make_client, case_context):
        client, _ = make_client(status_code=502, body="bad gateway")
        reply = await generate_chatbot_reply(case_context, "Hello?", client)
        assert reply.reply == CHATBOT_FALLBACK
        assert reply.error.kind is ErrorKind.NON_SUCCESS_STATUS

    @pytest.mark.asyncio
    async def test_chatbot_falls_back_on_empty_content(self, make_client, case_context):
        client, _ = make_client(text="   ")
        reply = await generate_chatbot_reply(case_context, "Hello?", client)
        assert reply.reply == CHATBOT_FALLBACK
        assert reply.ok

    @pytest.mark.asyncio
    async def test_chatbot_falls_back_on_undecodable_body(self, make_client, case_context):
        client, _ = make_client(
            responder=lambda _req: httpx.Response(200, content=b'{"a": "\xff"}')
        )
        reply = await generate_chatbot_reply(case_context, "Hello?", client)
        assert reply.reply == CHATBOT_FALLBACK
        assert reply.error.kind is ErrorKind.MALFORMED_JSON

    @pytest.mark.asyncio
    async def test_chatbot_skips_malformed_history_turns(self, make_client, case_context):
        client, endpoint = make_client(text="Noted.")
        history = [
            {"role": "user", "content": "Hi"},
            {"role": "tool", "content": "lookup"},
            {"role": "assistant"},
            {"role": "assistant", "content": "Hello."},
        ]
        reply = await generate_chatbot_reply(case_context, "Thanks", client, history=history)
        assert reply.reply == "Noted."
        roles = [m["role"] for m in endpoint.last_messages]
        assert roles == ["system", "user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_devils_advocate_prompt_and_metadata(self, make_client):
        payload = completion_body("Your timeline has a gap.", citations=["c1"])
        client, endpoint = make_client(payload=payload)
        reply = await generate_devils_advocate_reply(
            CaseContext(), "The tenant always paid on time.", client
        )
        assert reply.reply == "Your timeline has a gap."
        assert reply.metadata.citations == ("c1",)
        final = endpoint.last_messages[-1]["content"]
        assert final.startswith('User\'s statement/argument: "The tenant always paid on time."')
        assert "No documents uploaded." not in final

    @pytest.mark.asyncio
    async def test_devils_advocate_fallback(self, make_client):
        client, _ = make_client(api_key=None)
        reply = await generate_devils_advocate_reply(CaseContext(), "x", client)
        assert reply.reply == DEVILS_ADVOCATE_FALLBACK

    def test_reply_html_escapes_and_breaks_lines(self):
        reply = ChatReply(reply="<b>Point</b>\nNext & last")
        assert reply.reply_html == "&lt;b&gt;Point&lt;/b&gt;<br>Next &amp; last"
