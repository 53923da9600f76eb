"""
File-based credential store for Online Picket Line.

Keeps the single opaque API key in one file readable only by the owner.
The token value is never logged.
"""

import os
from pathlib import Path
from typing import Optional
from picketline.core.errors import StorageError
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.credentials")


class FileCredentialStore:
    """토큰 파일 저장소 (0600 권한)"""

    def __init__(self, path: str):
        self.path = Path(path)

    async def get(self) -> Optional[str]:
        """저장된 토큰 또는 None"""
        try:
            if not self.path.exists():
                return None
            token = self.path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StorageError(f"credential read failed: {e}") from e
        return token or None

    async def set(self, token: str) -> None:
        """토큰을 저장합니다 (기존 값 대체)."""
        token = token.strip()
        if not token:
            raise ValueError("empty token")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # 기존 파일을 지우고 소유자 전용 권한으로 새로 생성
            self.path.unlink(missing_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token)
        except OSError as e:
            raise StorageError(f"credential write failed: {e}") from e
        log.info("API 키 저장됨")

    async def clear(self) -> None:
        """토큰을 삭제합니다."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"credential clear failed: {e}") from e
        log.info("API 키 삭제됨")

    async def has_token(self) -> bool:
        return await self.get() is not None
