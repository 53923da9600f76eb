"""
Refresh orchestrator for Online Picket Line.

Coordinates the snapshot cache and the remote data provider. It is the
only writer of the cached snapshot. Every network or storage failure is
converted into a failed outcome; the previous snapshot stays in force.
Concurrent callers join the refresh already in flight instead of issuing
a second fetch.
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional

from picketline.cache.snapshot_cache import SnapshotCache
from picketline.core.errors import FailureReason, PicketLineError, RateLimited
from picketline.core.models import Coordinates, RefreshOutcome
from picketline.observability import metrics
from picketline.observability.logging_setup import get_logger
from picketline.ports.provider import DataProviderPort

log = get_logger("picketline.refresh")

OutcomeListener = Callable[[RefreshOutcome], None]


class RefreshState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    FETCHING = "fetching"
    APPLYING = "applying"


class RefreshOrchestrator:
    """스냅샷 갱신 오케스트레이터"""

    def __init__(self,
                 cache: SnapshotCache,
                 provider: DataProviderPort,
                 *,
                 timeout_sec: float = 15.0,
                 radius_meters: Optional[int] = None):
        """
        초기화합니다.

        Args:
            cache: 스냅샷 캐시
            provider: 데이터 제공자
            timeout_sec: 조회 타임아웃 (초). 초과 시 전송 실패로 처리
            radius_meters: 조회 반경 재정의
        """
        self.cache = cache
        self.provider = provider
        self.timeout = timeout_sec
        self.radius_meters = radius_meters
        self.state = RefreshState.IDLE
        self.last_outcome: Optional[RefreshOutcome] = None
        self._inflight: Optional[asyncio.Task] = None
        self._listeners: List[OutcomeListener] = []

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        """
        갱신 결과 리스너를 등록합니다.

        Returns:
            등록 해제 함수
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def refresh(self, location: Optional[Coordinates], *, force: bool = False) -> RefreshOutcome:
        """
        필요하면 스냅샷을 갱신합니다.

        진행 중인 갱신이 있으면 새 요청을 만들지 않고 그 결과를 함께 기다립니다.

        Args:
            location: 현재 위치 (없으면 failed(no_location))
            force: True면 이동 거리와 무관하게 조회

        Returns:
            updated | unchanged | failed(reason)
        """
        if self.busy:
            log.debug("진행 중인 갱신에 합류")
            return await asyncio.shield(self._inflight)

        self._inflight = asyncio.create_task(self._run(location, force))
        return await asyncio.shield(self._inflight)

    async def _run(self, location: Optional[Coordinates], force: bool) -> RefreshOutcome:
        try:
            outcome = await self._transition(location, force)
        finally:
            self.state = RefreshState.IDLE
        self._emit(outcome)
        return outcome

    async def _transition(self, location: Optional[Coordinates], force: bool) -> RefreshOutcome:
        self.state = RefreshState.CHECKING
        if location is None:
            log.info("위치 정보 없음, 갱신 보류")
            return RefreshOutcome.failed(FailureReason.NO_LOCATION, "Location not available yet")

        if not force and not self.cache.should_refresh(location):
            return RefreshOutcome.unchanged("within refresh threshold")

        previous = self.cache.current()
        content_hash = previous.content_hash if previous else None

        self.state = RefreshState.FETCHING
        try:
            result = await asyncio.wait_for(
                self.provider.fetch(location, content_hash=content_hash,
                                    radius_meters=self.radius_meters),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            log.warning(f"데이터 조회 타임아웃 timeout:{self.timeout}s")
            return RefreshOutcome.failed(FailureReason.TRANSPORT_ERROR,
                                         f"fetch timed out after {self.timeout}s")
        except PicketLineError as e:
            log.warning(f"데이터 조회 실패, 기존 스냅샷 유지 reason:{e.reason.value} error:{e}")
            retry_after = e.retry_after if isinstance(e, RateLimited) else None
            return RefreshOutcome.failed(e.reason, str(e), retry_after)

        self.state = RefreshState.APPLYING
        if not result.modified or result.snapshot is None:
            if previous is None:
                log.warning("캐시 없이 not modified 응답 수신")
            self.cache.mark_checked()
            return RefreshOutcome.unchanged("not modified")

        self.cache.replace(result.snapshot)
        try:
            await self.cache.persist()
        except PicketLineError as e:
            # 영속화 실패 시 이전 스냅샷으로 되돌림
            log.error(f"스냅샷 저장 실패, 이전 스냅샷 복구 error:{e}")
            if previous is not None:
                self.cache.replace(previous)
            else:
                await self.cache.clear()
            return RefreshOutcome.failed(e.reason, str(e))

        return RefreshOutcome.updated()

    def _emit(self, outcome: RefreshOutcome) -> None:
        self.last_outcome = outcome
        reason = outcome.reason.value if outcome.reason else ""
        metrics.refresh_outcomes.labels(outcome=outcome.status, reason=reason).inc()
        log.info(f"갱신 결과 status:{outcome.status} reason:{reason or '-'}")
        for listener in list(self._listeners):
            try:
                listener(outcome)
            except Exception:
                log.exception("갱신 결과 리스너 오류")
