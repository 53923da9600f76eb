"""
Notification sink port interface.

This module defines the protocol for posting user-visible alerts.
"""

from typing import Protocol

class NotificationSinkPort(Protocol):
    """알림 발송 포트 인터페이스"""
    
    async def post(self, title: str, body: str, dedupe_key: str) -> None:
        """
        알림을 발송합니다.
        
        Args:
            title: 알림 제목
            body: 알림 본문
            dedupe_key: 중복 억제 키 (지오펜스 id)
        """
        ...
