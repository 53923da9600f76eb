"""
Provider payload validation for Online Picket Line.

This module contains the wire models of the mobile data endpoint and
the pure function that converts a validated payload into a Snapshot.
Optional wire fields stay optional only where the domain allows it.
"""

import json
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError, InvalidHost
from .domain import normalize_host
from .models import ACTION_TYPES, BlocklistRecord, Coordinates, GeofenceRecord, Snapshot
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.payload")


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WireCoordinates(_Wire):
    lat: float
    lng: float


class WireCachedRegion(_Wire):
    center: WireCoordinates
    radius_meters: int = Field(alias="radiusMeters")
    refresh_threshold_meters: int = Field(alias="refreshThresholdMeters")


class WireGeofence(_Wire):
    id: str
    type: Optional[str] = None
    action_id: str = Field(default="", alias="actionId")
    employer_id: str = Field(alias="employerId")
    employer_name: str = Field(alias="employerName")
    action_type: str = Field(default="other", alias="actionType")
    organization: Optional[str] = None
    location: Optional[str] = None
    coordinates: WireCoordinates
    distance: int = 0
    notification_radius: int = Field(alias="notificationRadius")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    description: Optional[str] = None
    demands: Optional[str] = None
    more_info_url: Optional[str] = Field(default=None, alias="moreInfoUrl")
    location_name: Optional[str] = Field(default=None, alias="locationName")
    location_type: Optional[str] = Field(default=None, alias="locationType")


class WireGeofenceCollection(_Wire):
    total: int = 0
    all: List[WireGeofence] = Field(default_factory=list)


class WireBlocklistEntry(_Wire):
    url: str
    employer: str
    employer_id: str = Field(alias="employerId")
    action_type: str = Field(default="other", alias="actionType")
    action_id: str = Field(default="", alias="actionId")


class WireBlocklist(_Wire):
    total_urls: int = Field(default=0, alias="totalUrls")
    total_employers: int = Field(default=0, alias="totalEmployers")
    urls: List[WireBlocklistEntry] = Field(default_factory=list)


class MobileDataResponse(_Wire):
    """/mobile/data 응답"""
    version: str
    cached_region: WireCachedRegion = Field(alias="cachedRegion")
    suggested_refresh_interval: int = Field(alias="suggestedRefreshInterval")
    geofences: WireGeofenceCollection = Field(default_factory=WireGeofenceCollection)
    blocklist: WireBlocklist = Field(default_factory=WireBlocklist)
    generated_at: str = Field(alias="generatedAt")


def action_type_of(raw: Optional[str]) -> str:
    """알 수 없는 행동 유형은 other로 매핑합니다."""
    if not raw:
        return "other"
    value = raw.strip().lower().replace("-", "_").replace(" ", "_")
    return value if value in ACTION_TYPES else "other"


def _blocklist_records(entries: List[WireBlocklistEntry]) -> Tuple[BlocklistRecord, ...]:
    records: List[BlocklistRecord] = []
    seen: Set[Tuple[str, str]] = set()
    for entry in entries:
        try:
            host = normalize_host(entry.url)
        except InvalidHost:
            log.warning(f"파싱 불가 차단 URL 건너뜀 url:{entry.url!r} employer:{entry.employer_id}")
            continue

        key = (entry.employer_id, host)
        if key in seen:
            continue
        seen.add(key)

        records.append(BlocklistRecord(
            host=host,
            employer_id=entry.employer_id,
            employer_name=entry.employer,
            action_type=action_type_of(entry.action_type),
            action_id=entry.action_id,
        ))
    return tuple(records)


def _geofence_records(items: List[WireGeofence]) -> Tuple[GeofenceRecord, ...]:
    records: List[GeofenceRecord] = []
    for item in items:
        if item.notification_radius < 0:
            log.warning(f"음수 알림 반경 지오펜스 건너뜀 id:{item.id} radius:{item.notification_radius}")
            continue
        try:
            coords = Coordinates(lat=item.coordinates.lat, lng=item.coordinates.lng)
        except ValidationError:
            log.warning(f"좌표 범위 밖 지오펜스 건너뜀 id:{item.id}")
            continue

        records.append(GeofenceRecord(
            id=item.id,
            employer_id=item.employer_id,
            employer_name=item.employer_name,
            action_type=action_type_of(item.action_type),
            action_id=item.action_id,
            coordinates=coords,
            notification_radius_meters=item.notification_radius,
            distance_meters=item.distance,
            organization=item.organization,
            location=item.location,
            location_name=item.location_name,
            location_type=item.location_type,
            description=item.description,
            demands=item.demands,
            start_date=item.start_date,
            end_date=item.end_date,
            more_info_url=item.more_info_url,
        ))
    return tuple(records)


def to_snapshot(raw: Union[bytes, str, Dict[str, Any]], content_hash: str) -> Snapshot:
    """
    원시 응답을 검증하고 Snapshot으로 변환합니다.

    Args:
        raw: 응답 본문 (bytes/str) 또는 이미 디코딩된 dict
        content_hash: 응답의 콘텐츠 해시

    Returns:
        새 Snapshot

    Raises:
        DecodeError: JSON이 아니거나 필수 필드가 누락/잘못된 경우
    """
    if isinstance(raw, (bytes, str)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise DecodeError(f"Failed to decode response: {e}") from e

    if not isinstance(raw, dict):
        raise DecodeError("Failed to decode response: top-level object expected")

    try:
        payload = MobileDataResponse.model_validate(raw)
        region = payload.cached_region
        snapshot = Snapshot(
            schema_version=payload.version,
            region_center=Coordinates(lat=region.center.lat, lng=region.center.lng),
            region_radius_meters=region.radius_meters,
            refresh_threshold_meters=region.refresh_threshold_meters,
            suggested_refresh_interval_ms=payload.suggested_refresh_interval,
            blocklist=_blocklist_records(payload.blocklist.urls),
            geofences=_geofence_records(payload.geofences.all),
            generated_at=payload.generated_at,
            content_hash=content_hash,
        )
    except ValidationError as e:
        raise DecodeError(f"Failed to decode response: {e.error_count()} validation error(s)") from e

    log.debug(f"스냅샷 변환 완료 blocklist:{len(snapshot.blocklist)} "
              f"geofences:{len(snapshot.geofences)} hash:{content_hash}")
    return snapshot
