"""
Error taxonomy for Online Picket Line.

Local failures (InvalidHost, NoLocation) and provider/transport failures
that the refresh orchestrator converts into a failed outcome.
"""

from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """갱신 실패 사유"""
    NO_LOCATION = "no_location"
    MISSING_CREDENTIAL = "missing_credential"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    PROVIDER_ERROR = "provider_error"
    TRANSPORT_ERROR = "transport_error"
    DECODE_ERROR = "decode_error"
    STORAGE_ERROR = "storage_error"


class PicketLineError(Exception):
    """모든 도메인 오류의 기반 클래스"""

    reason: FailureReason = FailureReason.PROVIDER_ERROR


class InvalidHost(PicketLineError, ValueError):
    """호스트를 추출할 수 없는 입력"""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid host: {value!r}")


class NoLocation(PicketLineError):
    reason = FailureReason.NO_LOCATION

    def __init__(self, message: str = "Location not available yet"):
        super().__init__(message)


class MissingCredential(PicketLineError):
    reason = FailureReason.MISSING_CREDENTIAL

    def __init__(self, message: str = "API key not configured"):
        super().__init__(message)


class ProviderError(PicketLineError):
    """
    데이터 제공자가 2xx 이외의 상태로 응답한 경우.

    Args:
        status: HTTP 상태 코드
        message: 응답 본문의 오류 메시지
        code: 기계 판독용 오류 코드 (있으면)
    """

    reason = FailureReason.PROVIDER_ERROR

    def __init__(self, status: int, message: str = "", code: Optional[str] = None):
        self.status = status
        self.message = message or "Unknown error"
        self.code = code
        super().__init__(f"[{status}] {self.message}")


class Unauthorized(ProviderError):
    reason = FailureReason.UNAUTHORIZED

    def __init__(self, status: int = 401, message: str = "Unauthorized", code: Optional[str] = None):
        super().__init__(status, message, code)


class RateLimited(ProviderError):
    reason = FailureReason.RATE_LIMITED

    def __init__(self, retry_after: Optional[int] = None, message: str = "", code: Optional[str] = None):
        self.retry_after = retry_after
        if not message:
            if retry_after is not None:
                message = f"Rate limit exceeded. Please wait {retry_after} seconds."
            else:
                message = "Rate limit exceeded. Please try again later."
        super().__init__(429, message, code)


class ServerError(ProviderError):
    reason = FailureReason.SERVER_ERROR

    def __init__(self, status: int = 500, message: str = "Server error. Please try again later.",
                 code: Optional[str] = None):
        super().__init__(status, message, code)


class TransportError(PicketLineError):
    """연결 실패 또는 타임아웃"""
    reason = FailureReason.TRANSPORT_ERROR


class DecodeError(PicketLineError):
    """응답 본문을 해석할 수 없음"""
    reason = FailureReason.DECODE_ERROR


class StorageError(PicketLineError):
    """영속 저장소 입출력 실패"""
    reason = FailureReason.STORAGE_ERROR
