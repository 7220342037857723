"""Supabase データベース操作モジュール.

テーブル:
  parks — api_id (queue-times.com のパーク ID) でパークを引く。本モジュールからは読むだけ
  rides — park_id (parks.id) に紐づくアトラクション。名前がパーク内のキー
"""

from __future__ import annotations

import logging

from waitsync.config import STORE_PAGE_SIZE
from waitsync.errors import ParkNotFoundError, StoreWriteError
from waitsync.models import CanonicalRide, ParkRecord, StoredRide
from waitsync.session import StoreSession

logger = logging.getLogger(__name__)


class RideStore:
    """parks / rides テーブルの読み書き."""

    def __init__(self, session: StoreSession, page_size: int = STORE_PAGE_SIZE):
        self.session = session
        self.page_size = page_size

    def get_park_record(self, api_id: str) -> ParkRecord:
        """api_id に一致する parks レコードを取得する.

        Raises:
            ParkNotFoundError: 該当レコードが無い場合
        """
        resp = (
            self.session.table("parks")
            .select("*")
            .eq("api_id", api_id)
            .limit(1)
            .execute()
        )
        if not resp.data:
            raise ParkNotFoundError(f"No park record found for id {api_id}")
        return ParkRecord.from_row(resp.data[0])

    def get_rides(self, park_record_id: str) -> list[StoredRide]:
        """パークに紐づく rides を全件取得する (ページングは内部で処理)."""
        rows: list[dict] = []
        start = 0
        while True:
            resp = (
                self.session.table("rides")
                .select("*")
                .eq("park_id", park_record_id)
                .order("id")
                .range(start, start + self.page_size - 1)
                .execute()
            )
            page = resp.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size

        return [StoredRide.from_row(r) for r in rows]

    def save_ride(
        self, ride: CanonicalRide, park_record_id: str, ride_id: str | None = None
    ) -> None:
        """ride_id があれば更新、無ければパークに紐づけて新規作成する.

        Raises:
            StoreWriteError: 書き込みに失敗した場合
        """
        record = ride.to_record()
        try:
            if ride_id is not None:
                self.session.table("rides").update(record).eq("id", ride_id).execute()
            else:
                self.session.table("rides").insert({**record, "park_id": park_record_id}).execute()
        except Exception as e:
            raise StoreWriteError(f"rides 書き込み失敗: name={ride.name}, error={e}") from e
        logger.debug("rides %s: %s", "更新" if ride_id else "作成", ride.name)
