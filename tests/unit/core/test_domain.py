"""
호스트 정규화 테스트

이 모듈은 normalize_host 함수의 예시 기반 테스트와
hypothesis를 활용한 속성 기반 테스트를 수행합니다.
"""

import pytest
from hypothesis import given, strategies as st

from picketline.core.domain import normalize_host
from picketline.core.errors import InvalidHost


label = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=12).filter(
    lambda s: not s.startswith("-") and not s.endswith("-")
)
hostname = st.lists(label, min_size=2, max_size=4).map(".".join).filter(
    lambda h: not h.startswith("www.")
)


class TestNormalizeHost:
    """normalize_host 예시 테스트"""

    @pytest.mark.parametrize("raw,expected", [
        ("example.com", "example.com"),
        ("www.example.com", "example.com"),
        ("WWW.Example.COM", "example.com"),
        ("https://WWW.Example.COM", "example.com"),
        ("http://shop.example.com/path/to?q=1#top", "shop.example.com"),
        ("example.com/path", "example.com"),
        ("sub.example.com:8080", "sub.example.com"),
        ("  example.com  ", "example.com"),
        ("example.com.", "example.com"),
        ("https://user@example.com/", "example.com"),
    ])
    def test_normalize_valid(self, raw, expected):
        """유효한 입력 정규화"""
        assert normalize_host(raw) == expected

    def test_strips_only_one_www(self):
        """선행 www.는 정확히 한 번만 제거"""
        assert normalize_host("www.www.example.com") == "www.example.com"

    def test_www_inside_host_is_kept(self):
        """중간의 www 라벨은 유지"""
        assert normalize_host("shop.www.example.com") == "shop.www.example.com"
        assert normalize_host("wwwexample.com") == "wwwexample.com"

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "https://",
        "http:///path",
        "not a url",
        "a..b.com",
        ".example.com",
        "http://[::1",
    ])
    def test_normalize_invalid(self, raw):
        """파싱 불가 입력은 InvalidHost"""
        with pytest.raises(InvalidHost):
            normalize_host(raw)

    def test_non_string_rejected(self):
        """문자열이 아닌 입력"""
        with pytest.raises(InvalidHost):
            normalize_host(None)  # type: ignore[arg-type]

    def test_invalid_host_is_value_error(self):
        """InvalidHost는 ValueError로도 잡힘"""
        with pytest.raises(ValueError):
            normalize_host("")


class TestNormalizeHostProperties:
    """hypothesis 속성 테스트"""

    @given(host=hostname)
    def test_canonical_host_is_fixed_point(self, host):
        """정규 호스트는 다시 정규화해도 같음"""
        assert normalize_host(host) == host

    @given(host=hostname, scheme=st.sampled_from(["", "http://", "https://"]),
           www=st.booleans(), path=st.sampled_from(["", "/", "/a/b", "?x=1"]))
    def test_decorations_removed(self, host, scheme, www, path):
        """스킴/www/경로/대소문자 장식은 결과에 영향 없음"""
        raw = f"{scheme}{'www.' if www else ''}{host.upper()}{path}"
        assert normalize_host(raw) == host

    @given(host=hostname)
    def test_result_is_lowercase(self, host):
        """결과는 항상 소문자"""
        result = normalize_host(host.upper())
        assert result == result.lower()
