"""
Online Picket Line API client.

This module provides an aiohttp client for the remote data provider:
conditional snapshot fetches, field reports and the active strike list.
Non-2xx statuses are mapped onto the error taxonomy; no automatic retry
is performed here.
"""

import asyncio
import hashlib
import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

import aiohttp
from pydantic import ValidationError

from picketline.core.errors import (
    DecodeError, MissingCredential, ProviderError, RateLimited,
    ServerError, TransportError, Unauthorized,
)
from picketline.core.models import (
    ActiveStrike, Coordinates, FetchResult, GpsSnapshot, ReportReceipt, StrikeReport,
)
from picketline.core.payload import to_snapshot
from picketline.observability.logging_setup import get_logger
from picketline.ports.credentials import CredentialStorePort

log = get_logger("picketline.api")

DEFAULT_BASE_URL = "https://onlinepicketline.com/api"
DEFAULT_USER_AGENT = "OnlinePicketLine-Python/0.1"


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Retry-After 헤더(초)를 정수로 변환합니다. 날짜 형식은 무시합니다."""
    if value is None:
        return None
    value = value.strip()
    return int(value) if value.isdigit() else None


def _error_body(body: bytes) -> Tuple[str, Optional[str]]:
    """오류 응답 본문에서 (message, code)를 추출합니다."""
    try:
        data = json.loads(body)
    except ValueError:
        return body.decode("utf-8", errors="replace").strip()[:200], None
    if not isinstance(data, dict):
        return "", None
    message = data.get("error") or data.get("message") or ""
    code = data.get("code")
    return str(message), (str(code) if code is not None else None)


def error_for_status(status: int, body: bytes, headers: Mapping[str, str]) -> ProviderError:
    """
    2xx 이외의 상태를 오류 분류로 변환합니다.

    Args:
        status: HTTP 상태 코드
        body: 응답 본문
        headers: 응답 헤더

    Returns:
        대응하는 ProviderError 하위 클래스 인스턴스
    """
    message, code = _error_body(body)
    if status in (401, 403):
        return Unauthorized(status, message or "Unauthorized", code)
    if status == 429:
        return RateLimited(parse_retry_after(headers.get("Retry-After")), message, code)
    if 500 <= status <= 599:
        return ServerError(status, message or "Server error. Please try again later.", code)
    return ProviderError(status, message or f"Unknown error (status code: {status})", code)


def content_hash_of(headers: Mapping[str, str], body: bytes) -> str:
    """ETag → X-Content-Hash → 본문 SHA-256 순으로 콘텐츠 해시를 결정합니다."""
    return (headers.get("ETag")
            or headers.get("X-Content-Hash")
            or hashlib.sha256(body).hexdigest())


class PicketLineApiClient:
    """Online Picket Line API 클라이언트"""

    def __init__(self,
                 credentials: CredentialStorePort,
                 base_url: str = DEFAULT_BASE_URL,
                 *,
                 timeout: float = 15.0,
                 radius_meters: Optional[int] = None,
                 user_agent: str = DEFAULT_USER_AGENT):
        """
        초기화합니다.

        Args:
            credentials: API 키 저장소
            base_url: API 기본 URL
            timeout: 요청 타임아웃 (초)
            radius_meters: 조회 반경 재정의 (기본값 없음)
            user_agent: User-Agent 헤더
        """
        self.credentials = credentials
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.radius_meters = radius_meters
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None

        log.info(f"API 클라이언트 초기화됨 base_url:{self.base_url}")

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            headers={
                "Accept": "application/json",
                "User-Agent": self.user_agent,
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        if self.session:
            await self.session.close()
            self.session = None

    async def _request(self,
                       method: str,
                       endpoint: str,
                       *,
                       params: Optional[Dict[str, str]] = None,
                       json_body: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Tuple[int, bytes, Mapping[str, str]]:
        """
        API 요청을 수행합니다.

        Returns:
            (상태 코드, 본문, 헤더). 2xx 와 304 만 반환됩니다.

        Raises:
            MissingCredential: API 키 미설정
            ProviderError: 2xx/304 이외의 상태
            TransportError: 연결 실패/타임아웃
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. async with를 사용하세요.")

        token = await self.credentials.get()
        if not token:
            raise MissingCredential()

        url = f"{self.base_url}{endpoint}"
        request_headers = {"X-API-Key": token}
        if headers:
            request_headers.update(headers)

        try:
            async with self.session.request(method, url, params=params, json=json_body,
                                            headers=request_headers) as response:
                body = await response.read()
                status = response.status
                response_headers = response.headers
        except asyncio.TimeoutError as e:
            log.warning(f"API 요청 타임아웃 {method} {endpoint}")
            raise TransportError(f"request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            log.warning(f"API 요청 전송 실패 {method} {endpoint} error:{e}")
            raise TransportError(str(e) or e.__class__.__name__) from e

        if status == 304 or 200 <= status < 300:
            return status, body, response_headers

        error = error_for_status(status, body, response_headers)
        log.warning(f"API 오류 응답 {method} {endpoint} {error}")
        raise error

    def _decode(self, body: bytes) -> Any:
        try:
            return json.loads(body)
        except ValueError as e:
            raise DecodeError(f"Failed to decode response: {e}") from e

    async def fetch(self,
                    location: Coordinates,
                    *,
                    content_hash: Optional[str] = None,
                    radius_meters: Optional[int] = None) -> FetchResult:
        """
        현재 위치 기준 모바일 데이터를 조회합니다.

        Args:
            location: 조회 기준 위치
            content_hash: 캐시된 해시 (If-None-Match)
            radius_meters: 반경 재정의

        Returns:
            FetchResult (not modified 또는 새 스냅샷)
        """
        params = {"lat": str(location.lat), "lng": str(location.lng)}
        radius = radius_meters if radius_meters is not None else self.radius_meters
        if radius is not None:
            params["radius"] = str(radius)

        headers = {"If-None-Match": content_hash} if content_hash else None
        status, body, response_headers = await self._request(
            "GET", "/mobile/data", params=params, headers=headers
        )

        if status == 304:
            log.info(f"모바일 데이터 변경 없음 hash:{content_hash}")
            return FetchResult.not_modified()

        new_hash = content_hash_of(response_headers, body)
        snapshot = to_snapshot(body, new_hash)
        log.info(f"모바일 데이터 수신 hash:{new_hash} blocklist:{len(snapshot.blocklist)} "
                 f"geofences:{len(snapshot.geofences)}")
        return FetchResult.fetched(snapshot)

    async def _post_receipt(self, endpoint: str, payload: Dict[str, Any]) -> ReportReceipt:
        _, body, _ = await self._request("POST", endpoint, json_body=payload)
        data = self._decode(body)
        try:
            return ReportReceipt.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Failed to decode response: {e.error_count()} validation error(s)") from e

    async def submit_report(self, report: StrikeReport) -> ReportReceipt:
        """현장 제보를 제출합니다."""
        receipt = await self._post_receipt(
            "/mobile/submit-strike", report.model_dump(by_alias=True, exclude_none=True)
        )
        log.info(f"현장 제보 제출됨 id:{receipt.id} employer:{report.employer.name}")
        return receipt

    async def submit_gps_snapshot(self, snapshot: GpsSnapshot) -> ReportReceipt:
        """현장 좌표 제보를 제출합니다."""
        receipt = await self._post_receipt(
            "/mobile/gps-snapshot", snapshot.model_dump(by_alias=True, exclude_none=True)
        )
        log.info(f"GPS 스냅샷 제출됨 id:{receipt.id} action:{snapshot.action_id}")
        return receipt

    async def fetch_active_strikes(self) -> List[ActiveStrike]:
        """활성 파업 목록을 조회합니다."""
        _, body, _ = await self._request("GET", "/mobile/active-strikes")
        data = self._decode(body)
        items = data.get("strikes", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise DecodeError("Failed to decode response: strikes list expected")
        try:
            strikes = [ActiveStrike.model_validate(item) for item in items]
        except ValidationError as e:
            raise DecodeError(f"Failed to decode response: {e.error_count()} validation error(s)") from e
        log.info(f"활성 파업 목록 가져옴 count:{len(strikes)}")
        return strikes
