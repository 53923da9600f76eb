"""
SQLite-based key-value store for Online Picket Line.

This module implements a SQLite-based durable key-value store
used to keep the last snapshot and its content hash across restarts.
"""

import aiosqlite
import time
from typing import Dict, Optional
from picketline.core.errors import StorageError
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.kv")

UPSERT = (
    "INSERT INTO kv (k, v, updated_at) VALUES (?, ?, ?) "
    "ON CONFLICT(k) DO UPDATE SET v = excluded.v, updated_at = excluded.updated_at"
)

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    k TEXT PRIMARY KEY,
    v TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);
"""

class SQLiteKVStore:
    """SQLite 기반 키-값 저장소"""
    
    def __init__(self, path: str):
        """
        초기화합니다.
        
        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        self._initialized = False
        log.info(f"SQLiteKVStore 초기화: {path}")
    
    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.executescript(SCHEMA)
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StorageError(f"kv init failed: {e}") from e
        self._initialized = True
        log.info("SQLiteKVStore 스키마 초기화 완료")
    
    async def _ensure(self) -> None:
        if not self._initialized:
            await self.init()
    
    async def get(self, key: str) -> Optional[str]:
        """
        키로 값을 조회합니다.
        
        Args:
            key: 조회할 키
            
        Returns:
            값 또는 None
        """
        await self._ensure()
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute("SELECT v FROM kv WHERE k = ?", (key,))
                row = await cursor.fetchone()
                return row[0] if row else None
        except (aiosqlite.Error, OSError) as e:
            log.error(f"SQLiteKVStore get 오류 key:{key} error:{e}")
            raise StorageError(f"kv get failed: {e}") from e
    
    async def set(self, key: str, value: str) -> None:
        """
        키-값을 저장합니다 (있으면 덮어씀).
        
        Args:
            key: 저장할 키
            value: 저장할 값
        """
        await self._ensure()
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(UPSERT, (key, value, int(time.time())))
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            log.error(f"SQLiteKVStore set 오류 key:{key} error:{e}")
            raise StorageError(f"kv set failed: {e}") from e

    async def set_many(self, items: Dict[str, str]) -> None:
        """
        여러 키-값을 한 트랜잭션으로 저장합니다.

        커밋 전에 실패하면 연결 종료 시 롤백되어 어느 키도 바뀌지 않습니다.
        """
        await self._ensure()
        now = int(time.time())
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.executemany(UPSERT, [(k, v, now) for k, v in items.items()])
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            log.error(f"SQLiteKVStore set_many 오류 keys:{sorted(items)} error:{e}")
            raise StorageError(f"kv set failed: {e}") from e

    async def delete(self, key: str) -> None:
        """
        키를 삭제합니다.
        
        Args:
            key: 삭제할 키
        """
        await self._ensure()
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute("DELETE FROM kv WHERE k = ?", (key,))
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            log.error(f"SQLiteKVStore delete 오류 key:{key} error:{e}")
            raise StorageError(f"kv delete failed: {e}") from e
    
    async def get_count(self) -> int:
        """
        현재 저장된 항목 수를 반환합니다.
        
        Returns:
            항목 수
        """
        await self._ensure()
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute("SELECT COUNT(*) FROM kv")
                result = await cursor.fetchone()
                return result[0] if result else 0
        except (aiosqlite.Error, OSError) as e:
            raise StorageError(f"kv count failed: {e}") from e
