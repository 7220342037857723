"""queue-times.com 待ち時間 API クライアント.

レスポンス構造:
  {"lands": [{"name": ..., "rides": [{"name", "wait_time", "is_open", "last_updated"}, ...]}, ...]}
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from waitsync.config import QUEUE_TIMES_URL_TEMPLATE, REQUEST_TIMEOUT, USER_AGENT
from waitsync.errors import FetchError
from waitsync.models import RideObservation

logger = logging.getLogger(__name__)


class QueueTimesClient:
    """queue-times.com からパーク単位で待ち時間を取得する."""

    def __init__(
        self,
        url_template: str = QUEUE_TIMES_URL_TEMPLATE,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })

    def fetch_park_data(self, park_id: str) -> dict:
        """パークの待ち時間 JSON を取得する.

        Raises:
            FetchError: HTTP エラー、JSON でないレスポンス、lands が無い場合
        """
        url = self.url_template.format(park_id=park_id)
        logger.debug("取得中: %s", url)

        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"パーク {park_id} の取得に失敗: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError(f"パーク {park_id} のレスポンスが JSON ではありません") from e

        lands = data.get("lands") if isinstance(data, dict) else None
        if lands is None:
            raise FetchError("Invalid API response: missing lands")
        if not isinstance(lands, list):
            raise FetchError("Invalid API response: lands is not a list")
        return data

    def close(self) -> None:
        self.session.close()


def flatten_rides(data: dict) -> list[RideObservation]:
    """全エリア (land) のアトラクションを 1 つのリストにまとめる."""
    observations: list[RideObservation] = []
    for land in data.get("lands", []):
        rides: Any = land.get("rides") if isinstance(land, dict) else None
        if not isinstance(rides, list):
            continue
        observations.extend(RideObservation.from_payload(r) for r in rides)
    return observations
