"""
Snapshot cache for Online Picket Line.

Owns the single current Snapshot reference. Readers get an immutable
snapshot handle; replace() swaps the reference in one assignment so a
reader never observes a partially updated snapshot.
"""

import time
from typing import Callable, Optional

from pydantic import ValidationError

from picketline.core.errors import PicketLineError
from picketline.core.geo import distance_between
from picketline.core.models import Coordinates, Snapshot
from picketline.observability import metrics
from picketline.observability.logging_setup import get_logger
from picketline.ports.kvstore import KVStorePort

log = get_logger("picketline.cache")

# 영속 저장 키
CACHE_KEY = "opl_cached_data"
HASH_KEY = "opl_content_hash"


class SnapshotCache:
    """현재 스냅샷의 단일 소유자"""

    def __init__(self, store: KVStorePort, *, clock: Callable[[], float] = time.time):
        """
        초기화합니다.

        Args:
            store: 영속 키-값 저장소
            clock: 현재 시각 (초) 제공 함수
        """
        self.store = store
        self.clock = clock
        self._snapshot: Optional[Snapshot] = None
        self._last_checked: Optional[float] = None

    def current(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def content_hash(self) -> Optional[str]:
        snapshot = self._snapshot
        return snapshot.content_hash if snapshot else None

    @property
    def last_checked(self) -> Optional[float]:
        return self._last_checked

    def should_refresh(self, location: Coordinates) -> bool:
        """
        재조회가 필요한지 판단합니다.

        캐시가 비어 있거나, 위치가 캐시 지역 중심에서
        refresh_threshold_meters 보다 멀어진 경우 True.
        """
        snapshot = self._snapshot
        if snapshot is None:
            return True
        distance = distance_between(location, snapshot.region_center)
        return distance > snapshot.refresh_threshold_meters

    def is_stale(self, now: Optional[float] = None) -> bool:
        """마지막 확인 이후 서버 권장 갱신 주기가 지났는지 확인합니다."""
        snapshot = self._snapshot
        if snapshot is None or self._last_checked is None:
            return snapshot is not None
        if snapshot.suggested_refresh_interval_ms <= 0:
            return False
        now = self.clock() if now is None else now
        return (now - self._last_checked) * 1000 >= snapshot.suggested_refresh_interval_ms

    def mark_checked(self, now: Optional[float] = None) -> None:
        self._last_checked = self.clock() if now is None else now

    def replace(self, snapshot: Snapshot) -> Optional[Snapshot]:
        """
        스냅샷을 원자적으로 교체합니다.

        Returns:
            이전 스냅샷 (없으면 None)
        """
        previous = self._snapshot
        self._snapshot = snapshot
        self.mark_checked()
        metrics.snapshot_blocklist_size.set(len(snapshot.blocklist))
        metrics.snapshot_geofence_count.set(len(snapshot.geofences))
        log.info(f"스냅샷 교체됨 hash:{snapshot.content_hash} "
                 f"blocklist:{len(snapshot.blocklist)} geofences:{len(snapshot.geofences)}")
        return previous

    async def persist(self) -> None:
        """
        현재 스냅샷과 해시를 영속 저장소에 기록합니다.

        Raises:
            StorageError: 저장소 기록 실패
        """
        snapshot = self._snapshot
        if snapshot is None:
            return
        # 스냅샷과 해시는 함께 기록되어야 함
        await self.store.set_many({
            CACHE_KEY: snapshot.model_dump_json(),
            HASH_KEY: snapshot.content_hash,
        })
        log.debug(f"스냅샷 저장 완료 hash:{snapshot.content_hash}")

    async def restore(self) -> Optional[Snapshot]:
        """
        영속 저장소에서 스냅샷을 복원합니다.

        디코딩/저장소 오류는 치명적이지 않으며 캐시를 비운 상태로 둡니다.
        """
        try:
            data = await self.store.get(CACHE_KEY)
            stored_hash = await self.store.get(HASH_KEY)
        except PicketLineError as e:
            log.warning(f"스냅샷 복원 실패 (저장소) error:{e}")
            return None

        if not data:
            log.info("저장된 스냅샷 없음")
            return None

        try:
            snapshot = Snapshot.model_validate_json(data, context={"canonical": True})
        except ValidationError as e:
            log.warning(f"저장된 스냅샷 디코딩 실패, 빈 캐시로 시작 errors:{e.error_count()}")
            return None

        if stored_hash and stored_hash != snapshot.content_hash:
            log.warning(f"저장된 해시 불일치, 스냅샷 내장 해시 사용 stored:{stored_hash} "
                        f"embedded:{snapshot.content_hash}")

        self._snapshot = snapshot
        metrics.snapshot_blocklist_size.set(len(snapshot.blocklist))
        metrics.snapshot_geofence_count.set(len(snapshot.geofences))
        log.info(f"스냅샷 복원됨 hash:{snapshot.content_hash} generated_at:{snapshot.generated_at}")
        return snapshot

    async def clear(self) -> None:
        """메모리와 영속 저장소의 스냅샷을 모두 삭제합니다. 실패하지 않습니다."""
        self._snapshot = None
        self._last_checked = None
        metrics.snapshot_blocklist_size.set(0)
        metrics.snapshot_geofence_count.set(0)
        for key in (CACHE_KEY, HASH_KEY):
            try:
                await self.store.delete(key)
            except Exception as e:
                log.error(f"캐시 키 삭제 실패 key:{key} error:{e}")
        log.info("스냅샷 캐시 삭제됨")
