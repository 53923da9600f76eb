"""
Notification sinks for Online Picket Line.

Home Assistant mobile push (dedupe via the companion app "tag") and a
log-only sink used when no Home Assistant is configured.
"""

from picketline.adapters.homeassistant.client import HAClient
from picketline.observability.logging_setup import get_logger

log = get_logger("picketline.notify")


class HANotifier:
    """Home Assistant notify 서비스로 알림 발송"""

    def __init__(self, client: HAClient, service: str):
        self.client = client
        self.service = service

    async def post(self, title: str, body: str, dedupe_key: str) -> None:
        await self.client.notify(self.service, title, body, tag=dedupe_key)


class LogNotifier:
    """
    로그로만 알림을 남기는 sink.

    같은 키의 알림은 이전 알림을 대체합니다 (컴패니언 앱 tag 와 같은 동작).
    재진입 알림도 매번 기록됩니다.
    """

    def __init__(self):
        self.active: dict = {}

    async def post(self, title: str, body: str, dedupe_key: str) -> None:
        if dedupe_key in self.active:
            log.debug(f"기존 알림 대체 key:{dedupe_key}")
        self.active[dedupe_key] = (title, body)
        log.info(f"[알림] {title} - {body} key:{dedupe_key}")
