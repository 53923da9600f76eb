# picketline/main.py
import os, asyncio
from contextlib import AsyncExitStack
from typing import List, Optional
import uvicorn
from picketline.settings import Settings
from picketline.observability.logging_setup import setup_logger, get_logger
from picketline.observability.server import Services, create_app
from picketline.adapters.storage.sqlite_kv import SQLiteKVStore
from picketline.adapters.credentials.file_store import FileCredentialStore
from picketline.adapters.api.client import PicketLineApiClient
from picketline.adapters.homeassistant import HAClient, HALocationSource, HANotifier, LogNotifier
from picketline.cache.snapshot_cache import SnapshotCache
from picketline.orchestrators import DestinationGuard, ProximityMonitor, RefreshOrchestrator

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _opt_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else default

def build_settings() -> Settings:
    s = Settings()

    # API
    s.api.base_url = os.getenv("OPL_API_BASE_URL", s.api.base_url)
    s.api.api_key = os.getenv("OPL_API_KEY", s.api.api_key)
    s.api.timeout_sec = float(os.getenv("OPL_API_TIMEOUT_SEC", s.api.timeout_sec))
    s.api.radius_meters = _opt_int("OPL_RADIUS_METERS", s.api.radius_meters)

    # 저장소
    s.storage.kv_path = os.getenv("OPL_KV_PATH", s.storage.kv_path)
    s.storage.credential_path = os.getenv("OPL_CREDENTIAL_PATH", s.storage.credential_path)

    # HA
    s.ha.base_url = os.getenv("HA_BASE_URL", s.ha.base_url)
    s.ha.token = os.getenv("HA_TOKEN", s.ha.token)
    s.ha.device_tracker = os.getenv("HA_DEVICE_TRACKER", s.ha.device_tracker)
    s.ha.notify_service = os.getenv("HA_NOTIFY_SERVICE", s.ha.notify_service)
    s.ha.poll_interval_sec = float(os.getenv("HA_POLL_INTERVAL_SEC", s.ha.poll_interval_sec))

    # 모니터
    s.monitor.enabled = _b("MONITOR_ENABLED", s.monitor.enabled)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)

    return s

async def main():
    s = build_settings()
    setup_logger(s.observability.log_level)
    log = get_logger()
    log.info("설정 로드 완료")

    kv = SQLiteKVStore(s.storage.kv_path)
    await kv.init()
    credentials = FileCredentialStore(s.storage.credential_path)
    if s.api.api_key:
        await credentials.set(s.api.api_key)

    # 네트워크 활동 전에 캐시 복원
    cache = SnapshotCache(kv)
    await cache.restore()

    api = PicketLineApiClient(
        credentials,
        s.api.base_url,
        timeout=s.api.timeout_sec,
        radius_meters=s.api.radius_meters,
        user_agent=s.api.user_agent,
    )
    ha = HAClient(s.ha.base_url, s.ha.token, s.ha.timeout_sec) if s.ha.token else None

    async with AsyncExitStack() as stack:
        await stack.enter_async_context(api)
        if ha is not None:
            await stack.enter_async_context(ha)

        refresher = RefreshOrchestrator(cache, api, timeout_sec=s.api.timeout_sec,
                                        radius_meters=s.api.radius_meters)
        notifier = HANotifier(ha, s.ha.notify_service) if ha and s.ha.notify_service else LogNotifier()
        monitor = ProximityMonitor(cache, refresher, notifier,
                                   respect_refresh_interval=s.monitor.respect_refresh_interval)
        guard = DestinationGuard(cache, history_size=s.monitor.history_size)
        log.info("구성요소 생성 완료")

        tasks: List[asyncio.Task] = []
        app = create_app(s, Services(cache=cache, refresher=refresher, monitor=monitor,
                                     guard=guard, provider=api, credentials=credentials))
        server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0",
                                               port=s.observability.http_port, log_level="info"))
        tasks.append(asyncio.create_task(server.serve()))

        if s.monitor.enabled and ha is not None and s.ha.device_tracker:
            source = HALocationSource(ha, s.ha.device_tracker, s.ha.poll_interval_sec)
            tasks.append(asyncio.create_task(monitor.run(source)))
        else:
            log.info("위치 소스 미설정, HTTP /location 으로만 위치 수신")

        await asyncio.gather(*tasks)

def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    run()
