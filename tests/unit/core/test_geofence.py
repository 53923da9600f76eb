"""
지오펜스 평가 테스트

반경 판정, 거리 순 정렬, 진입 이벤트 중복 억제를 검증합니다.
"""

from hypothesis import given, strategies as st

from picketline.core.geofence import evaluate
from picketline.core.models import Coordinates, ProximityState
from factories import make_fence


INSIDE = Coordinates(lat=40.0, lng=-75.0)
# 약 1.1km 북쪽
OUTSIDE = Coordinates(lat=40.01, lng=-75.0)


class TestEvaluate:
    """evaluate 함수 테스트"""

    def test_hit_within_radius(self):
        fence = make_fence("f1", 40.0, -75.0, radius=500)
        result = evaluate(INSIDE, [fence], ProximityState())

        assert result.hits == (fence,)
        assert result.new_entries == (fence,)
        assert result.state.current_near == frozenset({"f1"})
        assert result.distances[0] == 0.0

    def test_miss_outside_radius(self):
        fence = make_fence("f1", 40.0, -75.0, radius=500)
        result = evaluate(OUTSIDE, [fence], ProximityState())

        assert result.hits == ()
        assert result.new_entries == ()
        assert result.state.current_near == frozenset()

    def test_radius_is_per_geofence(self):
        """반경은 지오펜스마다 다름"""
        small = make_fence("small", 40.01, -75.0, radius=100)
        large = make_fence("large", 40.01, -75.0, radius=2000)
        result = evaluate(INSIDE, [small, large], ProximityState())
        assert [f.id for f in result.hits] == ["large"]

    def test_boundary_is_inclusive(self):
        """거리 == 반경이면 hit"""
        fence = make_fence("f1", 40.0, -75.0, radius=0)
        result = evaluate(INSIDE, [fence], ProximityState())
        assert result.hits == (fence,)

    def test_hits_sorted_nearest_first(self):
        far = make_fence("far", 40.004, -75.0, radius=1000)
        near = make_fence("near", 40.001, -75.0, radius=1000)
        mid = make_fence("mid", 40.002, -75.0, radius=1000)
        result = evaluate(INSIDE, [far, near, mid], ProximityState())

        assert [f.id for f in result.hits] == ["near", "mid", "far"]
        assert list(result.distances) == sorted(result.distances)

    def test_ties_keep_input_order(self):
        a = make_fence("a", 40.001, -75.0, radius=1000)
        b = make_fence("b", 40.001, -75.0, radius=1000)
        assert [f.id for f in evaluate(INSIDE, [b, a], ProximityState()).hits] == ["b", "a"]
        assert [f.id for f in evaluate(INSIDE, [a, b], ProximityState()).hits] == ["a", "b"]

    def test_empty_geofences(self):
        result = evaluate(INSIDE, [], ProximityState(current_near=frozenset({"gone"})))
        assert result.hits == ()
        assert result.state.current_near == frozenset()


class TestEntryDedup:
    """진입 이벤트 중복 억제"""

    def test_entry_exit_reentry_sequence(self):
        """진입 → 체류 → 이탈 → 재진입"""
        fence = make_fence("F", 40.0, -75.0, radius=500)
        state = ProximityState()

        first = evaluate(INSIDE, [fence], state)
        assert first.new_entries == (fence,)

        second = evaluate(INSIDE, [fence], first.state)
        assert second.hits == (fence,)
        assert second.new_entries == ()

        third = evaluate(OUTSIDE, [fence], second.state)
        assert third.hits == ()
        assert "F" not in third.state.current_near

        fourth = evaluate(INSIDE, [fence], third.state)
        assert fourth.new_entries == (fence,)

    def test_only_new_fence_reported(self):
        a = make_fence("a", 40.0, -75.0, radius=500)
        b = make_fence("b", 40.0005, -75.0, radius=500)
        result = evaluate(INSIDE, [a, b], ProximityState(current_near=frozenset({"a"})))
        assert [f.id for f in result.hits] == ["a", "b"]
        assert [f.id for f in result.new_entries] == ["b"]

    def test_duplicate_ids_reported_once(self):
        a1 = make_fence("dup", 40.0, -75.0, radius=500)
        a2 = make_fence("dup", 40.0001, -75.0, radius=500)
        result = evaluate(INSIDE, [a1, a2], ProximityState())
        assert len(result.hits) == 2
        assert [f.id for f in result.new_entries] == ["dup"]

    def test_previous_state_not_mutated(self):
        state = ProximityState()
        evaluate(INSIDE, [make_fence("f", 40.0, -75.0, radius=500)], state)
        assert state.current_near == frozenset()

    @given(radius=st.integers(min_value=0, max_value=5000),
           repeats=st.integers(min_value=2, max_value=6))
    def test_repeated_samples_alert_at_most_once(self, radius, repeats):
        """같은 위치 반복 시 진입은 최대 한 번"""
        fence = make_fence("F", 40.001, -75.0, radius=radius)
        state = ProximityState()
        entries = 0
        for _ in range(repeats):
            result = evaluate(INSIDE, [fence], state)
            entries += len(result.new_entries)
            state = result.state
        assert entries <= 1
