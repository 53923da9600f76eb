"""
Core domain models for Online Picket Line.

This module defines the core domain models using Pydantic v2
for type safety and validation. Snapshot data is immutable once
constructed; a refresh always produces a brand new Snapshot.
"""

import uuid
from datetime import datetime, timezone
from typing import FrozenSet, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .domain import normalize_host
from .errors import FailureReason

# 노동 행동 유형
ActionType = Literal["strike", "lockout", "picket", "boycott", "work_stoppage", "other"]
ACTION_TYPES: Tuple[str, ...] = ("strike", "lockout", "picket", "boycott", "work_stoppage", "other")

# 위치 권한 상태
AuthorizationStatus = Literal["not_determined", "denied", "authorized"]


class Coordinates(BaseModel):
    """위도/경도 (도 단위)"""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class BlocklistRecord(BaseModel):
    """차단 목록 레코드. host는 항상 정규형으로 저장됩니다."""
    model_config = ConfigDict(frozen=True)

    host: str
    employer_id: str
    employer_name: str
    action_type: ActionType = "other"
    action_id: str = ""

    @field_validator("host", mode="before")
    @classmethod
    def _canonical_host(cls, v, info: ValidationInfo):
        # 저장소에서 복원된 값은 이미 정규형
        if info.context and info.context.get("canonical") and isinstance(v, str):
            return v
        return normalize_host(v)

    @property
    def key(self) -> Tuple[str, str]:
        """레코드 식별 키 (employer_id, host)"""
        return (self.employer_id, self.host)


class GeofenceRecord(BaseModel):
    """분쟁 장소 주변의 원형 알림 구역"""
    model_config = ConfigDict(frozen=True)

    id: str
    employer_id: str
    employer_name: str
    action_type: ActionType = "other"
    action_id: str = ""
    coordinates: Coordinates
    notification_radius_meters: int = Field(ge=0)
    distance_meters: int = 0
    organization: Optional[str] = None
    location: Optional[str] = None
    location_name: Optional[str] = None
    location_type: Optional[str] = None
    description: Optional[str] = None
    demands: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    more_info_url: Optional[str] = None


class Snapshot(BaseModel):
    """차단 목록 + 지오펜스 + 지역 메타데이터의 불변 묶음"""
    model_config = ConfigDict(frozen=True)

    schema_version: str
    region_center: Coordinates
    region_radius_meters: int = Field(ge=0)
    refresh_threshold_meters: int = Field(ge=0)
    suggested_refresh_interval_ms: int = Field(ge=0)
    blocklist: Tuple[BlocklistRecord, ...] = ()
    geofences: Tuple[GeofenceRecord, ...] = ()
    generated_at: str
    content_hash: str


class ProximityState(BaseModel):
    """현재 반경 안에 있는 지오펜스 id 집합"""
    model_config = ConfigDict(frozen=True)

    current_near: FrozenSet[str] = frozenset()


class ProximityResult(BaseModel):
    """지오펜스 평가 결과"""
    model_config = ConfigDict(frozen=True)

    hits: Tuple[GeofenceRecord, ...] = ()
    new_entries: Tuple[GeofenceRecord, ...] = ()
    state: ProximityState = Field(default_factory=ProximityState)
    distances: Tuple[float, ...] = ()


class FetchResult(BaseModel):
    """데이터 제공자 조회 결과: 새 스냅샷 또는 not modified"""
    model_config = ConfigDict(frozen=True)

    modified: bool
    snapshot: Optional[Snapshot] = None

    @classmethod
    def not_modified(cls) -> "FetchResult":
        return cls(modified=False)

    @classmethod
    def fetched(cls, snapshot: Snapshot) -> "FetchResult":
        return cls(modified=True, snapshot=snapshot)


class RefreshOutcome(BaseModel):
    """갱신 결과: updated | unchanged | failed(reason)"""
    model_config = ConfigDict(frozen=True)

    status: Literal["updated", "unchanged", "failed"]
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None
    retry_after: Optional[int] = None

    @classmethod
    def updated(cls) -> "RefreshOutcome":
        return cls(status="updated")

    @classmethod
    def unchanged(cls, detail: Optional[str] = None) -> "RefreshOutcome":
        return cls(status="unchanged", detail=detail)

    @classmethod
    def failed(cls, reason: FailureReason, detail: Optional[str] = None,
               retry_after: Optional[int] = None) -> "RefreshOutcome":
        return cls(status="failed", reason=reason, detail=detail, retry_after=retry_after)

    @property
    def ok(self) -> bool:
        return self.status != "failed"


# ---- 제보 / 활성 파업 ----

class EmployerSubmission(BaseModel):
    name: str = Field(min_length=1)
    industry: Optional[str] = None
    website: Optional[str] = None


class GpsCoordinates(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class ActionSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization: str
    action_type: ActionType = Field(default="strike", alias="actionType")
    location: str = "Unknown"
    start_date: str = Field(alias="startDate")
    duration_days: int = Field(default=7, ge=1, alias="durationDays")
    description: str
    demands: Optional[str] = None
    contact_info: Optional[str] = Field(default=None, alias="contactInfo")
    learn_more_url: Optional[str] = Field(default=None, alias="learnMoreUrl")
    coordinates: Optional[GpsCoordinates] = None


class StrikeReport(BaseModel):
    """현장 제보 (고용주 + 행동)"""
    employer: EmployerSubmission
    action: ActionSubmission


class GpsSnapshot(BaseModel):
    """특정 행동의 현장 좌표 제보"""
    model_config = ConfigDict(populate_by_name=True)

    action_id: str = Field(alias="actionId")
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    address: Optional[str] = None
    notes: Optional[str] = None


class ReportReceipt(BaseModel):
    success: bool
    message: str = ""
    id: str = ""


class ActiveStrike(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    organization: Optional[str] = None
    action_type: str = Field(alias="actionType")
    location: Optional[str] = None
    employer_name: str = Field(alias="employerName")
    employer_id: str = Field(alias="employerId")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    description: Optional[str] = None

    @property
    def display_name(self) -> str:
        label = self.organization or self.action_type.replace("_", " ").title()
        return f"{self.employer_name} - {label}"


# ---- 차단 요청 이력 ----

UserAction = Literal["pending", "blocked", "allowed"]


class BlockedRequest(BaseModel):
    """차단 목록에 걸린 목적지 기록"""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    url: str
    host: str
    employer: str
    employer_id: str
    action_type: ActionType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    app_name: Optional[str] = None
    user_action: UserAction = "pending"

