"""
도메인 모델 및 오류 분류 테스트
"""

import pytest
from pydantic import ValidationError

from picketline.core.errors import (
    FailureReason, InvalidHost, MissingCredential, NoLocation, ProviderError,
    RateLimited, ServerError, StorageError, TransportError, Unauthorized,
)
from picketline.core.models import (
    ActiveStrike, BlocklistRecord, BlockedRequest, Coordinates, FetchResult,
    GpsSnapshot, RefreshOutcome, StrikeReport,
)
from factories import make_snapshot


class TestModels:
    """모델 검증 테스트"""

    def test_coordinates_range(self):
        with pytest.raises(ValidationError):
            Coordinates(lat=91.0, lng=0.0)
        with pytest.raises(ValidationError):
            Coordinates(lat=0.0, lng=-181.0)

    def test_blocklist_record_normalizes_host(self):
        record = BlocklistRecord(host="https://WWW.Example.com/x", employer_id="e", employer_name="E")
        assert record.host == "example.com"
        assert record.key == ("e", "example.com")
        assert record.action_type == "other"

    def test_blocklist_record_rejects_invalid_host(self):
        with pytest.raises(ValidationError):
            BlocklistRecord(host="", employer_id="e", employer_name="E")

    def test_snapshot_is_immutable(self):
        snapshot = make_snapshot()
        with pytest.raises(ValidationError):
            snapshot.content_hash = "other"

    def test_fetch_result_constructors(self):
        assert FetchResult.not_modified().modified is False
        snapshot = make_snapshot()
        result = FetchResult.fetched(snapshot)
        assert result.modified is True
        assert result.snapshot is snapshot

    def test_refresh_outcome(self):
        assert RefreshOutcome.updated().ok
        assert RefreshOutcome.unchanged().status == "unchanged"
        failed = RefreshOutcome.failed(FailureReason.RATE_LIMITED, "slow down", 30)
        assert not failed.ok
        assert failed.reason == FailureReason.RATE_LIMITED
        assert failed.retry_after == 30

    def test_strike_report_aliases(self):
        report = StrikeReport.model_validate({
            "employer": {"name": "Acme"},
            "action": {
                "organization": "Local 42",
                "actionType": "picket",
                "startDate": "2025-01-01",
                "description": "Picket line at the gate",
            },
        })
        dumped = report.model_dump(by_alias=True, exclude_none=True)
        assert dumped["action"]["actionType"] == "picket"
        assert dumped["action"]["durationDays"] == 7
        assert "contactInfo" not in dumped["action"]

    def test_gps_snapshot_alias(self):
        snapshot = GpsSnapshot(action_id="a1", latitude=40.0, longitude=-75.0)
        assert snapshot.model_dump(by_alias=True, exclude_none=True) == {
            "actionId": "a1", "latitude": 40.0, "longitude": -75.0,
        }

    def test_active_strike_display_name(self):
        strike = ActiveStrike.model_validate({
            "id": "s1", "actionType": "work_stoppage",
            "employerName": "Acme", "employerId": "e1",
        })
        assert strike.display_name == "Acme - Work Stoppage"

        strike = ActiveStrike.model_validate({
            "id": "s2", "actionType": "strike", "organization": "Local 42",
            "employerName": "Acme", "employerId": "e1",
        })
        assert strike.display_name == "Acme - Local 42"

    def test_blocked_request_defaults(self):
        request = BlockedRequest(url="https://acme.com", host="acme.com", employer="Acme",
                                 employer_id="e1", action_type="strike")
        assert request.user_action == "pending"
        assert len(request.id) == 32
        assert request.timestamp.tzinfo is not None


class TestErrors:
    """오류 분류 테스트"""

    @pytest.mark.parametrize("error,reason", [
        (NoLocation(), FailureReason.NO_LOCATION),
        (MissingCredential(), FailureReason.MISSING_CREDENTIAL),
        (Unauthorized(), FailureReason.UNAUTHORIZED),
        (RateLimited(10), FailureReason.RATE_LIMITED),
        (ServerError(503), FailureReason.SERVER_ERROR),
        (ProviderError(404, "not found"), FailureReason.PROVIDER_ERROR),
        (TransportError("boom"), FailureReason.TRANSPORT_ERROR),
        (StorageError("disk"), FailureReason.STORAGE_ERROR),
    ])
    def test_reason_mapping(self, error, reason):
        assert error.reason == reason

    def test_provider_error_message(self):
        error = ProviderError(404, "Not found", "NOT_FOUND")
        assert str(error) == "[404] Not found"
        assert error.code == "NOT_FOUND"

    def test_rate_limited_message(self):
        assert RateLimited(30).status == 429
        assert "30 seconds" in str(RateLimited(30))
        assert RateLimited().retry_after is None

    def test_invalid_host_keeps_value(self):
        error = InvalidHost("::bad")
        assert error.value == "::bad"
        assert isinstance(error, ValueError)
