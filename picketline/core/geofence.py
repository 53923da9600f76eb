"""
Geofence proximity evaluation for Online Picket Line.

Pure function: given a location sample, the snapshot's geofences and the
previous proximity state, returns the fences within their own notification
radius (nearest first) and the ones newly entered since the previous call.
"""

from typing import List, Sequence, Set, Tuple

from .geo import haversine_distance
from .models import Coordinates, GeofenceRecord, ProximityResult, ProximityState


def evaluate(location: Coordinates,
             geofences: Sequence[GeofenceRecord],
             previous: ProximityState) -> ProximityResult:
    """
    지오펜스 근접 여부를 평가합니다.

    Args:
        location: 현재 위치 샘플
        geofences: 현재 스냅샷의 지오펜스 목록
        previous: 이전 평가에서 반환된 근접 상태

    Returns:
        hits(거리 오름차순), new_entries(새로 진입한 구역), 갱신된 상태
    """
    scored: List[Tuple[float, int, GeofenceRecord]] = []
    for order, fence in enumerate(geofences):
        d = haversine_distance(location.lat, location.lng,
                               fence.coordinates.lat, fence.coordinates.lng)
        if d <= fence.notification_radius_meters:
            scored.append((d, order, fence))

    # 거리 같으면 입력 순서 유지
    scored.sort(key=lambda item: (item[0], item[1]))

    hits = tuple(fence for _, _, fence in scored)
    distances = tuple(d for d, _, _ in scored)

    new_entries: List[GeofenceRecord] = []
    seen: Set[str] = set()
    for fence in hits:
        if fence.id in previous.current_near or fence.id in seen:
            continue
        seen.add(fence.id)
        new_entries.append(fence)

    return ProximityResult(
        hits=hits,
        new_entries=tuple(new_entries),
        state=ProximityState(current_near=frozenset(f.id for f in hits)),
        distances=distances,
    )
