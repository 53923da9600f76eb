"""
Proximity monitor for Online Picket Line.

Consumes location samples: refreshes the snapshot when due, evaluates
geofence proximity against the current snapshot and posts one alert per
geofence entry event.
"""

from typing import Optional, Tuple

from picketline.cache.snapshot_cache import SnapshotCache
from picketline.core.errors import PicketLineError
from picketline.core.geofence import evaluate
from picketline.core.models import Coordinates, GeofenceRecord, ProximityResult, ProximityState
from picketline.observability import metrics
from picketline.observability.logging_setup import get_logger, with_context
from picketline.orchestrators.refresh import RefreshOrchestrator
from picketline.ports.location import LocationSourcePort
from picketline.ports.notify import NotificationSinkPort

log = get_logger("picketline.monitor")


def action_label(action_type: str) -> str:
    return action_type.replace("_", " ")


def build_notification(fence: GeofenceRecord) -> Tuple[str, str]:
    """지오펜스 진입 알림의 (제목, 본문)을 만듭니다."""
    action = action_label(fence.action_type)
    title = f"Active {action.title()} Nearby"
    where = fence.location or "a picket location"
    body = f"Workers at {fence.employer_name} have an active {action}. You are near {where}."
    return title, body


class ProximityMonitor:
    """위치 → 갱신 → 지오펜스 평가 → 알림 파이프라인"""

    def __init__(self,
                 cache: SnapshotCache,
                 refresher: RefreshOrchestrator,
                 notifier: NotificationSinkPort,
                 *,
                 respect_refresh_interval: bool = True):
        """
        초기화합니다.

        Args:
            cache: 스냅샷 캐시 (읽기 전용으로 사용)
            refresher: 갱신 오케스트레이터
            notifier: 알림 sink
            respect_refresh_interval: 권장 갱신 주기 경과 시 강제 갱신 여부
        """
        self.cache = cache
        self.refresher = refresher
        self.notifier = notifier
        self.respect_refresh_interval = respect_refresh_interval
        self.state = ProximityState()
        self.last_location: Optional[Coordinates] = None
        self.nearby: Tuple[GeofenceRecord, ...] = ()

    async def handle_location(self, location: Coordinates) -> ProximityResult:
        """
        위치 샘플 하나를 처리합니다.

        Args:
            location: 위치 샘플

        Returns:
            지오펜스 평가 결과
        """
        self.last_location = location

        force = self.respect_refresh_interval and self.cache.is_stale()
        await self.refresher.refresh(location, force=force)

        # 갱신 대기 후의 상태를 읽고 같은 단계에서 바로 기록
        snapshot = self.cache.current()
        geofences = snapshot.geofences if snapshot else ()
        result = evaluate(location, geofences, self.state)
        self.state = result.state
        self.nearby = result.hits

        for fence in result.new_entries:
            metrics.geofence_entries.labels(action_type=fence.action_type).inc()
            await self._notify(fence)

        return result

    async def _notify(self, fence: GeofenceRecord) -> None:
        title, body = build_notification(fence)
        with with_context(geofence_id=fence.id):
            try:
                await self.notifier.post(title, body, dedupe_key=fence.id)
                log.info(f"지오펜스 진입 알림 발송 id:{fence.id} employer:{fence.employer_name}")
            except PicketLineError as e:
                metrics.notifications_failed.inc()
                log.error(f"지오펜스 알림 발송 실패 id:{fence.id} error:{e}")

    async def run(self, source: LocationSourcePort) -> None:
        """위치 소스가 끝날 때까지 샘플을 처리합니다."""
        log.info("근접 모니터 시작")
        async for location in source.samples():
            try:
                await self.handle_location(location)
            except PicketLineError as e:
                log.error(f"위치 처리 오류 error:{e}")
        log.info("위치 소스 종료, 근접 모니터 중지")
