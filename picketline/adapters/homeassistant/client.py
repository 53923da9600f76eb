"""
Home Assistant API client for Online Picket Line.

This module provides a client for the Home Assistant REST API used to
read a device tracker's position and to push mobile notifications.
"""

import aiohttp
import asyncio
from typing import Dict, Optional
from picketline.common.retry import retry_with_backoff
from picketline.core.errors import TransportError, Unauthorized
from picketline.core.geo import validate_coordinates
from picketline.core.models import Coordinates
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.ha")


def _is_retryable(e: Exception) -> bool:
    """4xx 응답은 재시도하지 않습니다."""
    if isinstance(e, aiohttp.ClientResponseError):
        return e.status >= 500
    return isinstance(e, (aiohttp.ClientError, asyncio.TimeoutError))


class HAClient:
    """Home Assistant API 클라이언트"""

    def __init__(self,
                 base_url: str,
                 token: str,
                 timeout: int = 10,
                 max_retries: int = 2):
        """
        초기화합니다.

        Args:
            base_url: Home Assistant API 기본 URL
            token: Home Assistant 장기 토큰
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 재시도 횟수
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None

        log.info("Home Assistant 클라이언트 초기화됨")

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json"
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        if self.session:
            await self.session.close()
            self.session = None

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Dict:
        """
        API 요청을 수행합니다.

        Args:
            method: HTTP 메서드
            endpoint: API 엔드포인트
            **kwargs: 추가 요청 매개변수

        Returns:
            응답 데이터

        Raises:
            Unauthorized: 토큰이 거부된 경우
            TransportError: 재시도 후에도 요청이 실패한 경우
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. async with를 사용하세요.")

        url = f"{self.base_url}{endpoint}"

        async def _request():
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                return await response.json()

        try:
            return await retry_with_backoff(_request, max_retries=self.max_retries,
                                            base_delay=0.5, max_delay=5.0,
                                            retry_if=_is_retryable)
        except aiohttp.ClientResponseError as e:
            if e.status in (401, 403):
                raise Unauthorized(e.status, "Home Assistant token rejected") from e
            raise TransportError(f"Home Assistant {method} {endpoint} failed: {e.status}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Home Assistant {method} {endpoint} failed: {e}") from e

    async def get_device_location(self, entity_id: str) -> Optional[Coordinates]:
        """
        device_tracker 엔티티의 좌표를 가져옵니다.

        Args:
            entity_id: 예) device_tracker.my_phone

        Returns:
            좌표 또는 None (좌표 속성이 없거나 유효하지 않은 경우)
        """
        data = await self._make_request("GET", f"/api/states/{entity_id}")
        attrs = data.get("attributes", {}) if isinstance(data, dict) else {}
        if "latitude" not in attrs or "longitude" not in attrs:
            log.warning(f"디바이스 좌표 없음 entity:{entity_id}")
            return None
        try:
            lat = float(attrs["latitude"])
            lon = float(attrs["longitude"])
        except (TypeError, ValueError):
            log.warning(f"디바이스 좌표 변환 실패 entity:{entity_id}")
            return None
        if not validate_coordinates(lat, lon):
            log.warning(f"디바이스 좌표 범위 밖 entity:{entity_id} lat:{lat} lon:{lon}")
            return None
        return Coordinates(lat=lat, lng=lon)

    async def notify(self, service: str, title: str, message: str, tag: Optional[str] = None):
        """
        모바일 앱에 푸시 알림을 발송합니다.

        같은 tag의 알림은 컴패니언 앱에서 교체되므로 중복 표시되지 않습니다.
        """
        payload: Dict = {"title": title, "message": message}
        if tag:
            payload["data"] = {"tag": tag, "group": "picketline"}
        result = await self._make_request(
            "POST", f"/api/services/notify/{service}", json=payload
        )
        log.info(f"푸시 알림 발송 성공 service:{service} tag:{tag}")
        return result
