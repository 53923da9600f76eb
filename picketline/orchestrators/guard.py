"""
Destination guard for Online Picket Line.

Checks URLs and hosts against the blocklist of the current snapshot and
keeps a bounded history of blocked destinations with the user's choice.
Hosts the user chose to allow are let through for the rest of the session.
"""

from collections import Counter, deque
from typing import Deque, Dict, List, Optional, Set

from picketline.cache.snapshot_cache import SnapshotCache
from picketline.core.blocklist import BlocklistIndex
from picketline.core.domain import normalize_host
from picketline.core.models import BlocklistRecord, BlockedRequest, Snapshot, UserAction
from picketline.observability import metrics
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.guard")


class DestinationGuard:
    """목적지 차단 여부 확인 및 이력 관리"""

    def __init__(self, cache: SnapshotCache, *, history_size: int = 100):
        self.cache = cache
        self._history: Deque[BlockedRequest] = deque(maxlen=history_size)
        self._indexed: Optional[Snapshot] = None
        self._index = BlocklistIndex()
        self._session_allowed: Set[str] = set()
        self._stats: Counter = Counter()

    def index(self) -> BlocklistIndex:
        """현재 스냅샷에 대한 인덱스 (스냅샷이 바뀌면 다시 생성)"""
        snapshot = self.cache.current()
        if snapshot is not self._indexed:
            self._index = BlocklistIndex.from_snapshot(snapshot)
            self._indexed = snapshot
        return self._index

    def find_match(self, target: str) -> Optional[BlocklistRecord]:
        return self.index().find_match(target)

    def is_blocked(self, target: str) -> bool:
        return self.find_match(target) is not None

    def check(self, target: str, app_name: Optional[str] = None) -> Optional[BlockedRequest]:
        """
        목적지를 확인하고 차단 대상이면 이력에 기록합니다.

        Args:
            target: URL 또는 호스트
            app_name: 요청한 앱 이름 (선택)

        Returns:
            차단 기록 또는 None (이번 세션에 허용된 호스트 포함)
        """
        record = self.find_match(target)
        host = normalize_host(target) if record is not None else None
        if record is None or host in self._session_allowed:
            metrics.destination_checks.labels(result="allowed").inc()
            return None

        metrics.destination_checks.labels(result="blocked").inc()
        self._stats["total"] += 1
        request = BlockedRequest(
            url=target,
            host=host,
            employer=record.employer_name,
            employer_id=record.employer_id,
            action_type=record.action_type,
            app_name=app_name,
        )
        self._history.appendleft(request)
        log.info(f"차단 목적지 감지 host:{request.host} employer:{record.employer_name}")
        return request

    def resolve(self, request_id: str, user_action: UserAction) -> BlockedRequest:
        """
        차단 기록에 사용자 선택을 반영합니다.

        Raises:
            KeyError: 해당 id의 기록이 없는 경우
        """
        for request in self._history:
            if request.id == request_id:
                if request.user_action != user_action:
                    if request.user_action != "pending":
                        self._stats[request.user_action] -= 1
                    self._stats[user_action] += 1
                request.user_action = user_action
                if user_action == "allowed":
                    self._session_allowed.add(request.host)
                else:
                    self._session_allowed.discard(request.host)
                log.info(f"차단 기록 처리 id:{request_id} action:{user_action}")
                return request
        raise KeyError(request_id)

    def stats(self) -> Dict[str, int]:
        """감지/허용/차단 건수"""
        return {
            "total": self._stats["total"],
            "allowed": self._stats["allowed"],
            "blocked": self._stats["blocked"],
        }

    @property
    def session_allowed(self) -> List[str]:
        return sorted(self._session_allowed)

    def clear_session(self) -> None:
        """이번 세션에 허용한 호스트 초기화"""
        self._session_allowed.clear()
        log.info("세션 허용 목록 초기화")

    def reset_statistics(self) -> None:
        """이력과 통계 초기화"""
        self._history.clear()
        self._stats.clear()
        log.info("차단 이력 및 통계 초기화")

    @property
    def history(self) -> List[BlockedRequest]:
        return list(self._history)
