# picketline/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class ApiConfig(BaseModel):
    base_url: str = "https://onlinepicketline.com/api"
    api_key: str | None = None                # 설정 시 자격 증명 저장소에 기록
    timeout_sec: float = 15.0
    user_agent: str = "OnlinePicketLine-Python/0.1"
    radius_meters: int | None = None          # None이면 서버 기본 반경

class StorageConfig(BaseModel):
    kv_path: str = "/data/picketline.db"
    credential_path: str = "/data/api_key"

class HAConfig(BaseModel):
    base_url: str = "http://supervisor/core"
    token: str = ""
    timeout_sec: int = 10
    device_tracker: str = ""                  # 예) device_tracker.my_phone
    notify_service: str = ""                  # 예) mobile_app_my_phone
    poll_interval_sec: float = 60.0

class MonitorConfig(BaseModel):
    enabled: bool = True
    respect_refresh_interval: bool = True
    history_size: int = 100

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "OnlinePicketLine"
    build_version: str = "0.1.0"
    log_level: str = "INFO"

class Settings(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ha: HAConfig = Field(default_factory=HAConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    observability: Observability = Field(default_factory=Observability)
