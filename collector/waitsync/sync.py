"""パーク単位の同期とバッチ実行.

処理フロー (パーク単位):
  1. queue-times.com から待ち時間を取得
  2. parks レコードを取得
  3. 全エリアのアトラクションを正規化
  4. 保存済み rides を名前で照合し、変化があったものだけ作成・更新

バッチ実行ではパークを順番に処理し、1 パークの失敗で残りを止めない。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from waitsync.config import PARKS
from waitsync.db import RideStore
from waitsync.fetcher import QueueTimesClient, flatten_rides
from waitsync.models import BatchResult, Park, ParkFailure, ParkSyncResult
from waitsync.rides import index_by_name, normalize_ride, ride_changed

logger = logging.getLogger(__name__)


def sync_park(park: Park, store: RideStore, client: QueueTimesClient) -> ParkSyncResult:
    """1 パーク分の待ち時間を同期する。例外はそのまま呼び出し元へ送出する."""
    logger.info("取得中: %s (%s)", park.name, park.park_id)
    data = client.fetch_park_data(park.park_id)
    park_record = store.get_park_record(park.park_id)

    rides = [normalize_ride(obs) for obs in flatten_rides(data)]

    existing = index_by_name(store.get_rides(park_record.id))
    saved = 0
    for ride in rides:
        current = existing.get(ride.name)
        if ride_changed(current, ride):
            store.save_ride(ride, park_record.id, current.id if current else None)
            saved += 1

    logger.info("%s: %d 件処理, %d 件更新", park.name, len(rides), saved)
    return ParkSyncResult(park_id=park.park_id, updated_rides=len(rides), saved_rides=saved)


def update_all_parks(
    store: RideStore,
    client: QueueTimesClient,
    parks: Iterable[Park] = PARKS,
) -> BatchResult:
    """全パークを順番に同期し、結果を集計する."""
    batch = BatchResult()
    for park in parks:
        try:
            batch.results.append(sync_park(park, store, client))
        except Exception as e:
            logger.error("パーク %s の更新に失敗: %s", park.park_id, e)
            batch.failures.append(ParkFailure(park_id=park.park_id, error=str(e)))

    batch.timestamp = datetime.now(timezone.utc)

    logger.info(
        "バッチ完了: 成功 %d パーク, 失敗 %d パーク, 処理 %d 件, 更新 %d 件",
        batch.parks_updated, batch.parks_failed, batch.total_processed, batch.total_saved,
    )
    return batch
