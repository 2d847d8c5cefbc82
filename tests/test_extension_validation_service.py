"""Unit tests for the pass-extension rule engine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import MagicMock, AsyncMock
from app.models.parking_pass import PassStatus
from app.services.extension_validation_service import validate_pass_extension
from app.services.policy_defaults import DEFAULT_POLICY
from app.services.validation_types import Authorization

NOW = datetime(2026, 3, 10, 12, 0)


def make_pass(status=PassStatus.ACTIVE, end_time=NOW + timedelta(hours=1), extension_count=0):
    return Authorization(id=7, status=status, end_time=end_time,
                         extension_count=extension_count, facility_id="building-1")


def make_repo(found):
    repo = MagicMock()
    repo.fetch_authorization_with_policy = AsyncMock(return_value=found)
    return repo


def codes(issues):
    return [i.code for i in issues]


class TestExtensionValidation:
    @pytest.mark.asyncio
    async def test_active_pass_can_be_extended(self):
        repo = make_repo((make_pass(), DEFAULT_POLICY))
        result = await validate_pass_extension(repo, 7, 2, now=NOW)
        assert result.is_valid
        assert result.warnings == []
        repo.fetch_authorization_with_policy.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_missing_pass(self):
        result = await validate_pass_extension(make_repo(None), 99, 2, now=NOW)
        assert codes(result.errors) == ["NOT_FOUND"]
        assert not result.is_valid

    @pytest.mark.asyncio
    async def test_extension_limit_reached(self):
        result = await validate_pass_extension(make_repo((make_pass(extension_count=1), DEFAULT_POLICY)),
                                               7, 2, now=NOW)
        assert codes(result.errors) == ["MAX_EXTENSIONS_EXCEEDED"]
        assert result.errors[0].metadata == {"currentExtensions": 1, "maxAllowed": 1}
        assert result.errors[0].message == (
            "Maximum 1 extension allowed. This pass has already been extended 1 time.")

    @pytest.mark.asyncio
    async def test_extension_too_long(self):
        result = await validate_pass_extension(make_repo((make_pass(), DEFAULT_POLICY)), 7, 5, now=NOW)
        assert codes(result.errors) == ["EXTENSION_TOO_LONG"]
        assert result.errors[0].metadata == {"requestedHours": 5, "maxAllowed": 4}

    @pytest.mark.asyncio
    async def test_grace_boundary_is_not_expired(self):
        auth = make_pass(end_time=NOW - timedelta(minutes=15))
        result = await validate_pass_extension(make_repo((auth, DEFAULT_POLICY)), 7, 2, now=NOW)
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_expired_beyond_grace(self):
        ended = NOW - timedelta(minutes=16)
        result = await validate_pass_extension(make_repo((make_pass(end_time=ended), DEFAULT_POLICY)),
                                               7, 2, now=NOW)
        assert codes(result.errors) == ["PASS_EXPIRED"]
        assert result.errors[0].metadata == {"expiredAt": ended, "gracePeriodMinutes": 15}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [PassStatus.CANCELLED, PassStatus.SUSPENDED])
    async def test_cancelled_or_suspended(self, status):
        result = await validate_pass_extension(make_repo((make_pass(status=status), DEFAULT_POLICY)),
                                               7, 2, now=NOW)
        assert codes(result.errors) == ["INVALID_STATUS"]
        assert result.errors[0].metadata == {"status": status.value}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("extension_count,hours", [(0, 1), (3, 1), (0, 10), (5, 10)])
    async def test_cancelled_always_invalid_status(self, extension_count, hours):
        auth = make_pass(status=PassStatus.CANCELLED, extension_count=extension_count)
        result = await validate_pass_extension(make_repo((auth, DEFAULT_POLICY)), 7, hours, now=NOW)
        assert "INVALID_STATUS" in codes(result.errors)

    @pytest.mark.asyncio
    async def test_extended_and_pending_passes_allowed(self):
        policy = replace(DEFAULT_POLICY, max_extensions=3)
        for status in (PassStatus.EXTENDED, PassStatus.PENDING):
            result = await validate_pass_extension(make_repo((make_pass(status=status), policy)), 7, 2, now=NOW)
            assert result.is_valid

    @pytest.mark.asyncio
    async def test_all_failures_reported_in_order(self):
        auth = make_pass(status=PassStatus.SUSPENDED, end_time=NOW - timedelta(hours=2), extension_count=1)
        result = await validate_pass_extension(make_repo((auth, DEFAULT_POLICY)), 7, 8, now=NOW)
        assert codes(result.errors) == [
            "MAX_EXTENSIONS_EXCEEDED", "EXTENSION_TOO_LONG", "PASS_EXPIRED", "INVALID_STATUS",
        ]

    @pytest.mark.asyncio
    async def test_missing_policy_uses_defaults(self):
        result = await validate_pass_extension(make_repo((make_pass(extension_count=1), None)), 7, 2, now=NOW)
        assert codes(result.errors) == ["MAX_EXTENSIONS_EXCEEDED"]

    @pytest.mark.asyncio
    async def test_fetch_failure_is_single_internal_error(self):
        repo = MagicMock()
        repo.fetch_authorization_with_policy = AsyncMock(side_effect=RuntimeError("timeout"))
        result = await validate_pass_extension(repo, 7, 2, now=NOW)
        assert codes(result.errors) == ["INTERNAL_ERROR"]
        assert result.warnings == []
