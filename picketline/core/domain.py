"""
Domain normalization for Online Picket Line.

Pure function turning a raw URL or host string into the canonical host
used by the blocklist: lowercase, no scheme, no path, no leading "www.".
"""

import re
from urllib.parse import urlsplit

from .errors import InvalidHost

WWW_PREFIX = "www."

# 공백, 경로 구분자 등 호스트에 올 수 없는 문자
_BAD_HOST_CHARS = re.compile(r"[\s/\\?#@%<>\"'`{}|^]")


def normalize_host(value: str) -> str:
    """
    URL 또는 호스트 문자열을 정규 호스트로 변환합니다.

    Args:
        value: "example.com", "www.example.com", "https://Example.com/path" 등

    Returns:
        소문자, 스킴/경로/선행 "www." 제거된 호스트

    Raises:
        InvalidHost: 호스트를 추출할 수 없는 경우
    """
    if not isinstance(value, str):
        raise InvalidHost(value)

    raw = value.strip()
    if not raw:
        raise InvalidHost(value)

    # 스킴이 없으면 https:// 를 붙여서 파싱
    candidate = raw if "://" in raw else f"https://{raw}"

    try:
        host = urlsplit(candidate).hostname
    except ValueError as e:
        raise InvalidHost(value) from e

    if not host:
        raise InvalidHost(value)

    # hostname은 이미 소문자. FQDN의 끝점 하나는 제거
    host = host.lower()
    if host.endswith("."):
        host = host[:-1]

    if host.startswith(WWW_PREFIX) and len(host) > len(WWW_PREFIX):
        host = host[len(WWW_PREFIX):]

    if not host or _BAD_HOST_CHARS.search(host):
        raise InvalidHost(value)

    # IPv6 리터럴이 아니면 빈 라벨 금지 ("a..b", ".a")
    if ":" not in host and any(label == "" for label in host.split(".")):
        raise InvalidHost(value)

    return host
