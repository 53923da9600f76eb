"""
HTTP endpoints for Online Picket Line.

This module implements health, readiness, metrics and info endpoints
plus the query surface used by callers: destination checks, location
updates, forced refresh, cache/credential management and field reports.
"""

import time
from dataclasses import dataclass
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from picketline.cache.snapshot_cache import SnapshotCache
from picketline.core.errors import MissingCredential, PicketLineError, RateLimited, Unauthorized
from picketline.core.models import Coordinates, GpsSnapshot, StrikeReport
from picketline.observability import metrics
from picketline.observability.logging_setup import get_logger
from picketline.orchestrators.guard import DestinationGuard
from picketline.orchestrators.monitor import ProximityMonitor
from picketline.orchestrators.refresh import RefreshOrchestrator
from picketline.ports.credentials import CredentialStorePort
from picketline.ports.provider import DataProviderPort
from picketline.settings import Settings

log = get_logger("picketline.http")


@dataclass
class Services:
    """HTTP 계층이 사용하는 구성요소 묶음"""
    cache: SnapshotCache
    refresher: RefreshOrchestrator
    monitor: ProximityMonitor
    guard: DestinationGuard
    provider: DataProviderPort
    credentials: CredentialStorePort


class LocationBody(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class ResolveBody(BaseModel):
    action: Literal["blocked", "allowed"]


class ApiKeyBody(BaseModel):
    api_key: str = Field(min_length=1)


def _provider_http_error(e: PicketLineError) -> HTTPException:
    """제공자 오류를 HTTP 오류로 변환합니다."""
    if isinstance(e, (Unauthorized, MissingCredential)):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, RateLimited):
        headers = {"Retry-After": str(e.retry_after)} if e.retry_after is not None else None
        return HTTPException(status_code=429, detail=str(e), headers=headers)
    return HTTPException(status_code=502, detail=str(e))


def create_app(settings: Settings, services: Services) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Online Picket Line destination and proximity service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """스냅샷이 있어야 준비 완료"""
        if services.cache.current() is None:
            return JSONResponse({"status": "waiting", "reason": "no snapshot"}, status_code=503)
        return JSONResponse({"status": "ready", "timestamp": time.time()})

    @app.get("/metrics")
    async def get_metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        metrics.uptime_seconds.set(time.time() - start_time)
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        snapshot = services.cache.current()
        outcome = services.refresher.last_outcome
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "uptime_seconds": int(time.time() - start_time),
            "has_api_key": await services.credentials.get() is not None,
            "refresh_state": services.refresher.state.value,
            "last_outcome": outcome.model_dump(mode="json") if outcome else None,
            "last_checked": services.cache.last_checked,
            "snapshot": None if snapshot is None else {
                "generated_at": snapshot.generated_at,
                "content_hash": snapshot.content_hash,
                "blocklist": len(snapshot.blocklist),
                "geofences": len(snapshot.geofences),
            },
        })

    @app.get("/check")
    async def check(target: str = Query(min_length=1), app_name: Optional[str] = None):
        """목적지 차단 여부 확인"""
        request = services.guard.check(target, app_name=app_name)
        if request is None:
            return {"target": target, "blocked": False}
        return {"target": target, "blocked": True, "request": request.model_dump(mode="json")}

    @app.post("/location")
    async def location(body: LocationBody):
        """위치 샘플 처리 (갱신 + 지오펜스 평가)"""
        result = await services.monitor.handle_location(Coordinates(lat=body.lat, lng=body.lng))
        return {
            "hits": [
                {**fence.model_dump(mode="json"), "distance": round(d, 1)}
                for fence, d in zip(result.hits, result.distances)
            ],
            "new_entries": [fence.id for fence in result.new_entries],
            "refresh": services.refresher.last_outcome.model_dump(mode="json")
            if services.refresher.last_outcome else None,
        }

    @app.post("/refresh")
    async def refresh():
        """마지막 위치 기준 강제 갱신"""
        outcome = await services.refresher.refresh(services.monitor.last_location, force=True)
        return outcome.model_dump(mode="json")

    @app.delete("/cache")
    async def clear_cache():
        await services.cache.clear()
        return {"ok": True}

    @app.put("/credentials")
    async def set_api_key(body: ApiKeyBody):
        try:
            await services.credentials.set(body.api_key)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except PicketLineError as e:
            log.error(f"API 키 저장 실패 error:{e}")
            raise HTTPException(status_code=500, detail=str(e))
        return {"ok": True}

    @app.delete("/credentials")
    async def clear_api_key():
        """API 키 삭제 (키 삭제가 실패해도 캐시는 삭제)"""
        try:
            await services.credentials.clear()
        except PicketLineError as e:
            log.error(f"API 키 삭제 실패 error:{e}")
            raise HTTPException(status_code=500, detail=str(e))
        finally:
            await services.cache.clear()
        return {"ok": True}

    @app.post("/reports")
    async def submit_report(report: StrikeReport):
        try:
            receipt = await services.provider.submit_report(report)
        except PicketLineError as e:
            log.error(f"현장 제보 실패 error:{e}")
            raise _provider_http_error(e)
        return receipt.model_dump()

    @app.post("/reports/gps")
    async def submit_gps(snapshot: GpsSnapshot):
        try:
            receipt = await services.provider.submit_gps_snapshot(snapshot)
        except PicketLineError as e:
            log.error(f"GPS 제보 실패 error:{e}")
            raise _provider_http_error(e)
        return receipt.model_dump()

    @app.get("/strikes")
    async def strikes():
        try:
            items = await services.provider.fetch_active_strikes()
        except PicketLineError as e:
            log.error(f"활성 파업 조회 실패 error:{e}")
            raise _provider_http_error(e)
        return [{**s.model_dump(mode="json"), "display_name": s.display_name} for s in items]

    @app.get("/blocked")
    async def blocked():
        return [r.model_dump(mode="json") for r in services.guard.history]

    @app.get("/blocked/stats")
    async def blocked_stats():
        return {**services.guard.stats(), "session_allowed": services.guard.session_allowed}

    @app.delete("/blocked")
    async def reset_blocked():
        """차단 이력 및 통계 초기화"""
        services.guard.reset_statistics()
        return {"ok": True}

    @app.delete("/blocked/session")
    async def clear_blocked_session():
        services.guard.clear_session()
        return {"ok": True}

    @app.post("/blocked/{request_id}")
    async def resolve_blocked(request_id: str, body: ResolveBody):
        try:
            request = services.guard.resolve(request_id, body.action)
        except KeyError:
            raise HTTPException(status_code=404, detail="blocked request not found")
        return request.model_dump(mode="json")

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "check": "/check?target=",
                "location": "/location",
                "refresh": "/refresh",
                "reports": "/reports",
                "strikes": "/strikes",
                "blocked": "/blocked",
                "blocked_stats": "/blocked/stats",
            }
        })

    return app
