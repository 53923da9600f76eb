"""
Key-value store port interface.

This module defines the protocol for durable key-value storage.
"""

from typing import Dict, Protocol, Optional

class KVStorePort(Protocol):
    """키-값 저장소 포트 인터페이스"""
    
    async def get(self, key: str) -> Optional[str]:
        """
        키로 값을 조회합니다.
        
        Args:
            key: 조회할 키
            
        Returns:
            값 또는 None
        """
        ...
    
    async def set(self, key: str, value: str) -> None:
        """
        키-값을 저장합니다.
        
        Args:
            key: 저장할 키
            value: 저장할 값
        """
        ...
    
    async def set_many(self, items: Dict[str, str]) -> None:
        """
        여러 키-값을 하나의 단위로 저장합니다.
        
        실패하면 어느 키도 바뀌지 않아야 합니다.
        
        Args:
            items: 저장할 키-값 묶음
        """
        ...
    
    async def delete(self, key: str) -> None:
        """
        키를 삭제합니다.
        
        Args:
            key: 삭제할 키
        """
        ...
