"""
Credential store port interface.

Holds a single opaque access token. The core never logs or persists it.
"""

from typing import Optional, Protocol

class CredentialStorePort(Protocol):
    """액세스 토큰 저장소 포트 인터페이스"""

    async def get(self) -> Optional[str]:
        """저장된 토큰 또는 None"""
        ...

    async def set(self, token: str) -> None:
        """토큰을 저장합니다 (기존 값 대체)."""
        ...

    async def clear(self) -> None:
        """토큰을 삭제합니다."""
        ...
