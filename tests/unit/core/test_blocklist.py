"""
차단 목록 인덱스 테스트

정확 일치 우선, 상위 도메인 일치, 도메인 경계 처리를 검증합니다.
"""

import pytest
from hypothesis import given, strategies as st

from picketline.core.blocklist import BlocklistIndex
from picketline.core.domain import normalize_host
from factories import make_record, make_snapshot


label = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=8)


class TestBlocklistIndex:
    """BlocklistIndex.find_match 테스트"""

    @pytest.fixture
    def index(self):
        return BlocklistIndex([make_record("example.com", employer_name="ExCo")])

    def test_exact_match(self, index):
        record = index.find_match("example.com")
        assert record is not None
        assert record.employer_name == "ExCo"

    def test_url_with_scheme_www_and_case(self, index):
        """스킴/www/대소문자 제거 후 일치"""
        assert index.find_match("https://WWW.Example.COM") is not None

    def test_subdomain_matches_parent(self, index):
        assert index.is_blocked("sub.example.com")
        assert index.is_blocked("https://a.b.example.com/checkout")

    def test_no_false_suffix_match(self, index):
        """도메인 경계 점 없는 접미사는 불일치"""
        assert index.find_match("notexample.com") is None
        assert not index.is_blocked("otherexample.com")

    def test_record_host_as_prefix_is_not_match(self, index):
        assert not index.is_blocked("example.com.evil.com")

    def test_parent_of_record_is_not_match(self):
        """레코드의 상위 도메인은 차단되지 않음"""
        index = BlocklistIndex([make_record("shop.example.com")])
        assert not index.is_blocked("example.com")

    def test_invalid_input_is_no_match(self, index):
        """파싱 불가 입력은 예외 없이 불일치"""
        assert index.find_match("") is None
        assert index.find_match("not a url") is None

    def test_empty_index(self):
        index = BlocklistIndex()
        assert len(index) == 0
        assert index.find_match("example.com") is None

    def test_from_snapshot_none(self):
        assert len(BlocklistIndex.from_snapshot(None)) == 0

    def test_from_snapshot(self):
        snapshot = make_snapshot(blocklist=[make_record("example.com"), make_record("acme.com")])
        index = BlocklistIndex.from_snapshot(snapshot)
        assert len(index) == 2
        assert index.records == snapshot.blocklist


class TestBlocklistTieBreak:
    """여러 레코드가 일치할 때 선택 규칙"""

    def test_exact_match_wins_over_earlier_parent(self):
        """정확 일치가 순서상 앞선 상위 도메인 일치보다 우선"""
        parent = make_record("example.com", employer_id="parent")
        exact = make_record("shop.example.com", employer_id="exact")
        index = BlocklistIndex([parent, exact])

        assert index.find_match("shop.example.com").employer_id == "exact"
        assert index.find_match("www.shop.example.com").employer_id == "exact"

    def test_earliest_parent_wins(self):
        """상위 도메인 후보가 여럿이면 원래 순서가 빠른 레코드"""
        first = make_record("shop.example.com", employer_id="first")
        second = make_record("example.com", employer_id="second")
        index = BlocklistIndex([first, second])
        assert index.find_match("a.shop.example.com").employer_id == "first"

        index = BlocklistIndex([second, first])
        assert index.find_match("a.shop.example.com").employer_id == "second"

    def test_duplicate_host_keeps_first_record(self):
        a = make_record("example.com", employer_id="a")
        b = make_record("example.com", employer_id="b")
        index = BlocklistIndex([a, b])
        assert index.find_match("example.com").employer_id == "a"


class TestBlocklistProperties:
    """hypothesis 속성 테스트"""

    @given(record_labels=st.lists(label, min_size=2, max_size=3),
           query_labels=st.lists(label, min_size=1, max_size=5))
    def test_match_iff_equal_or_dotted_suffix(self, record_labels, query_labels):
        """일치 ⇔ 같은 호스트이거나 "." + 레코드 호스트로 끝남"""
        record_host = ".".join(record_labels)
        if record_host.startswith("www."):
            return
        query = ".".join(query_labels)
        record = make_record(record_host)
        index = BlocklistIndex([record])

        host = normalize_host(query)
        expected = host == record.host or host.endswith("." + record.host)
        assert (index.find_match(query) is not None) == expected

    @given(record_labels=st.lists(label, min_size=2, max_size=3),
           sub=st.lists(label, min_size=1, max_size=3))
    def test_any_subdomain_matches(self, record_labels, sub):
        record_host = ".".join(record_labels)
        if record_host.startswith("www."):
            return
        index = BlocklistIndex([make_record(record_host)])
        query = ".".join(sub + [record_host])
        assert index.is_blocked(query)
