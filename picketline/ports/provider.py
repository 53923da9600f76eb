"""
Remote data provider port interface.

This module defines the protocol for fetching the current snapshot
and submitting field reports.
"""

from typing import List, Optional, Protocol
from picketline.core.models import (
    ActiveStrike, Coordinates, FetchResult, GpsSnapshot, ReportReceipt, StrikeReport,
)

class DataProviderPort(Protocol):
    """데이터 제공자 포트 인터페이스"""

    async def fetch(self,
                    location: Coordinates,
                    *,
                    content_hash: Optional[str] = None,
                    radius_meters: Optional[int] = None) -> FetchResult:
        """
        현재 위치 기준 스냅샷을 조회합니다.
        
        Args:
            location: 조회 기준 위치
            content_hash: 캐시된 스냅샷의 해시 (있으면 not modified 가능)
            radius_meters: 반경 재정의
            
        Returns:
            새 스냅샷 또는 not modified

        Raises:
            PicketLineError: 인증/속도 제한/서버/전송/디코딩 오류
        """
        ...

    async def submit_report(self, report: StrikeReport) -> ReportReceipt:
        """현장 제보를 제출합니다."""
        ...

    async def submit_gps_snapshot(self, snapshot: GpsSnapshot) -> ReportReceipt:
        """현장 좌표 제보를 제출합니다."""
        ...

    async def fetch_active_strikes(self) -> List[ActiveStrike]:
        """활성 파업 목록을 조회합니다."""
        ...
