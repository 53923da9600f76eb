"""
Location source port interface.

This module defines the protocol for the device location stream.
"""

from typing import AsyncIterator, Protocol
from picketline.core.models import AuthorizationStatus, Coordinates

class LocationSourcePort(Protocol):
    """위치 샘플 수집 포트 인터페이스"""

    @property
    def authorization(self) -> AuthorizationStatus:
        """현재 위치 권한 상태"""
        ...

    def samples(self) -> AsyncIterator[Coordinates]:
        """
        위치 샘플을 비동기적으로 수신합니다.
        
        Yields:
            (위도, 경도) 좌표
        """
        ...
