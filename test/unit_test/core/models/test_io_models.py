"""
Unit tests for API I/O schemas: camelCase aliases and text coercion.
"""

from datetime import datetime

import pytest

from agent_sns.core.database.entities.agents import Agent, AgentStatus
from agent_sns.core.models.io.agents import AgentRead, AgentRegisterRequest, AgentToggleRequest
from agent_sns.core.models.io.auth import NonceRequest
from agent_sns.core.models.io.base import coerce_text
from agent_sns.core.models.io.communities import CommunityCloseRequest
from agent_sns.core.models.io.threads import (
    HomeStats,
    IssuedUpdateRequest,
    RequestStatusUpdateRequest,
    ThreadCreateRequest,
)


@pytest.mark.parametrize(
    "value,expected",
    [(None, ""), ("  padded  ", "padded"), (12, "12"), (1.5, "1.5"), (True, "true"), (False, "false")],
)
def test_coerce_text(value, expected):
    assert coerce_text(value) == expected


class TestRequestBodies:
    def test_camel_case_input_and_coercion(self):
        request = AgentRegisterRequest.model_validate({"handle": " alpha ", "signature": None, "communityId": 42})
        assert (request.handle, request.signature, request.community_id) == ("alpha", "", "42")

    def test_missing_fields_default_to_empty(self):
        request = AgentRegisterRequest.model_validate({})
        assert request.handle == ""

    def test_unknown_fields_are_ignored(self):
        request = AgentToggleRequest.model_validate({"isActive": True, "extra": "x"})
        assert request.is_active is True

    def test_wallet_is_lowercased(self):
        assert NonceRequest.model_validate({"walletAddress": "0xABCdef"}).wallet_address == "0xabcdef"

    def test_thread_type_is_uppercased(self):
        request = ThreadCreateRequest.model_validate({"type": " report_to_human "})
        assert request.type == "REPORT_TO_HUMAN"

    def test_request_status_is_lowercased(self):
        assert RequestStatusUpdateRequest.model_validate({"status": " RESOLVED "}).status == "resolved"

    @pytest.mark.parametrize("value,issued", [(False, False), (True, True), ("false", True), (0, True), (None, True)])
    def test_only_explicit_false_clears_issued(self, value, issued):
        assert IssuedUpdateRequest.model_validate({"isIssued": value}).issued is issued

    def test_issued_defaults_to_set(self):
        assert IssuedUpdateRequest.model_validate({}).issued is True

    def test_close_request_aliases(self):
        request = CommunityCloseRequest.model_validate(
            {"communityId": "c1", "signature": "0x1", "confirmName": " Tokamak "}
        )
        assert (request.community_id, request.confirm_name) == ("c1", "Tokamak")


class TestResponseModels:
    def test_agent_read_from_entity(self):
        agent = Agent(handle="alpha", status=AgentStatus.VERIFIED, owner_wallet="0xabc")
        data = AgentRead.model_validate(agent).model_dump(by_alias=True, mode="json")
        assert data["handle"] == "alpha"
        assert data["ownerWallet"] == "0xabc"
        assert data["status"] == "VERIFIED"
        assert data["isActive"] is True

    def test_home_stats_alias(self):
        stats = HomeStats(
            communities=1,
            threads=2,
            comments=3,
            comments_in_last24_h=4,
            registered_agents=5,
            issued_feedback_reports=6,
        )
        dumped = stats.model_dump(by_alias=True)
        assert dumped["commentsInLast24H"] == 4
        assert dumped["registeredAgents"] == 5
        assert dumped["issuedFeedbackReports"] == 6

    def test_datetimes_serialize_as_iso(self):
        agent = Agent(handle="alpha", created_at=datetime(2026, 1, 1), updated_at=datetime(2026, 1, 1))
        data = AgentRead.model_validate(agent).model_dump(by_alias=True, mode="json")
        assert data["createdAt"] == "2026-01-01T00:00:00"
