"""
Blocklist index for Online Picket Line.

Answers exact-or-parent-domain match queries against the records of one
snapshot. An exact host match always wins; otherwise the earliest record
(in snapshot order) whose host is a parent domain of the query wins.
"""

from typing import Dict, Iterable, Optional, Tuple

from .domain import normalize_host
from .errors import InvalidHost
from .models import BlocklistRecord, Snapshot
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.blocklist")


class BlocklistIndex:
    """정규 호스트 → 레코드 인덱스 (읽기 전용)"""

    def __init__(self, records: Iterable[BlocklistRecord] = ()):
        self._records: Tuple[BlocklistRecord, ...] = tuple(records)
        # 같은 호스트가 여러 번 나오면 처음 것만 유지
        self._by_host: Dict[str, int] = {}
        for i, record in enumerate(self._records):
            self._by_host.setdefault(record.host, i)

    @classmethod
    def from_snapshot(cls, snapshot: Optional[Snapshot]) -> "BlocklistIndex":
        if snapshot is None:
            return cls()
        return cls(snapshot.blocklist)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> Tuple[BlocklistRecord, ...]:
        return self._records

    def find_match(self, raw_host_or_url: str) -> Optional[BlocklistRecord]:
        """
        URL 또는 호스트에 해당하는 차단 레코드를 찾습니다.

        Args:
            raw_host_or_url: 원시 URL/호스트 문자열

        Returns:
            일치하는 레코드 또는 None (파싱 불가 입력 포함)
        """
        try:
            host = normalize_host(raw_host_or_url)
        except InvalidHost:
            log.debug(f"호스트 파싱 실패, 불일치로 처리 input:{raw_host_or_url!r}")
            return None

        exact = self._by_host.get(host)
        if exact is not None:
            return self._records[exact]

        # 상위 도메인 후보 중 원래 순서가 가장 빠른 레코드
        best: Optional[int] = None
        labels = host.split(".")
        for i in range(1, len(labels)):
            idx = self._by_host.get(".".join(labels[i:]))
            if idx is not None and (best is None or idx < best):
                best = idx

        return None if best is None else self._records[best]

    def is_blocked(self, raw_host_or_url: str) -> bool:
        return self.find_match(raw_host_or_url) is not None
