"""
Home Assistant location source.

Polls one device_tracker entity and yields a sample whenever the
reported position changes.
"""

import asyncio
from typing import AsyncIterator, Optional
from picketline.adapters.homeassistant.client import HAClient
from picketline.core.errors import TransportError, Unauthorized
from picketline.core.models import AuthorizationStatus, Coordinates
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.ha.location")


class HALocationSource:
    """device_tracker 폴링 기반 위치 소스"""

    def __init__(self, client: HAClient, entity_id: str, poll_interval_sec: float = 60.0):
        """
        초기화합니다.

        Args:
            client: Home Assistant 클라이언트 (세션이 열린 상태)
            entity_id: 추적할 device_tracker 엔티티
            poll_interval_sec: 폴링 주기 (초)
        """
        self.client = client
        self.entity_id = entity_id
        self.poll_interval = poll_interval_sec
        self._authorization: AuthorizationStatus = "not_determined"
        self._last: Optional[Coordinates] = None

    @property
    def authorization(self) -> AuthorizationStatus:
        return self._authorization

    async def poll_once(self) -> Optional[Coordinates]:
        """
        한 번 조회하고 위치가 바뀌었으면 좌표를 반환합니다.

        Returns:
            새 좌표 또는 None (변화 없음/조회 실패)
        """
        try:
            location = await self.client.get_device_location(self.entity_id)
        except Unauthorized:
            if self._authorization != "denied":
                log.error(f"위치 조회 권한 거부됨 entity:{self.entity_id}")
            self._authorization = "denied"
            return None
        except TransportError as e:
            # 위치 오류는 치명적이지 않음, 다음 주기에 재시도
            log.warning(f"위치 조회 실패 entity:{self.entity_id} error:{e}")
            return None

        self._authorization = "authorized"
        if location is None or location == self._last:
            return None
        self._last = location
        return location

    async def samples(self) -> AsyncIterator[Coordinates]:
        """위치 샘플을 비동기적으로 생성합니다."""
        log.info(f"위치 폴링 시작 entity:{self.entity_id} interval:{self.poll_interval}s")
        while True:
            location = await self.poll_once()
            if location is not None:
                yield location
            await asyncio.sleep(self.poll_interval)
