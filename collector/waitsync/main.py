"""待ち時間同期 — メインエントリーポイント.

処理フロー:
  1. 5 分ごと (壁時計の 0, 5, 10, ... 分) にティックを実行
  2. Supabase セッションを確認し、無効なら再ログイン
  3. 全パークの待ち時間を同期
  4. 失敗はログに残して次のティックを待つ (ティック内での再試行はしない)

手動実行は run_once() を呼ぶ。
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterable
from datetime import datetime
from typing import Callable

from waitsync.config import LOG_DIR, PARKS, SYNC_INTERVAL_SECONDS, StoreSettings
from waitsync.db import RideStore
from waitsync.errors import ConfigError
from waitsync.fetcher import QueueTimesClient
from waitsync.models import Park, TickResult
from waitsync.session import StoreSession
from waitsync.sync import update_all_parks

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / f"sync_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def build_services() -> tuple[StoreSession, RideStore, QueueTimesClient]:
    """環境変数から Supabase セッション・ストア・API クライアントを組み立てる."""
    session = StoreSession.from_settings(StoreSettings.from_env())
    return session, RideStore(session), QueueTimesClient()


def run_tick(
    session: StoreSession,
    store: RideStore,
    client: QueueTimesClient,
    parks: Iterable[Park] = PARKS,
) -> TickResult:
    """ティック 1 回分を実行する。例外は送出せず TickResult で返す."""
    logger.info("=== 待ち時間同期 開始 ===")
    start_time = time.time()

    try:
        session.ensure_valid()
    except Exception as e:
        logger.exception("認証に失敗したため同期を中止します")
        return TickResult(success=False, stage="auth", error=str(e))

    try:
        batch = update_all_parks(store, client, parks)
    except Exception as e:
        logger.exception("同期処理に失敗しました")
        return TickResult(success=False, stage="batch", error=str(e))

    elapsed = time.time() - start_time
    logger.info("=== 待ち時間同期 完了 ===")
    logger.info("成功: %s, 所要時間: %.1f 秒", batch.success, elapsed)
    return TickResult(success=True, batch=batch)


def run_once() -> TickResult:
    """手動実行用。スケジュール実行と同じ処理を 1 回だけ行う."""
    session, store, client = build_services()
    try:
        return run_tick(session, store, client)
    finally:
        client.close()


def seconds_until_next_tick(now: float, interval: int = SYNC_INTERVAL_SECONDS) -> float:
    """次の実行時刻 (interval の倍数のエポック秒) までの秒数."""
    return interval - (now % interval)


def serve(
    session: StoreSession,
    store: RideStore,
    client: QueueTimesClient,
    interval: int = SYNC_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.time,
    max_ticks: int | None = None,
) -> None:
    """interval 秒ごとにティックを実行し続ける.

    ティックは同じスレッドで順に実行する。実行が interval を超えた場合、
    その間に過ぎた実行時刻は遅れて実行せずに捨て、次の倍数時刻を待つ
    (cron のように重ねて起動することはない)。
    """
    logger.info("スケジューラ開始: %d 秒間隔", interval)
    ticks = 0
    try:
        while max_ticks is None or ticks < max_ticks:
            sleep(seconds_until_next_tick(clock(), interval))
            run_tick(session, store, client)
            ticks += 1
    except KeyboardInterrupt:
        logger.info("停止しました (Ctrl+C)")


def main() -> None:
    setup_logging()
    try:
        session, store, client = build_services()
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        serve(session, store, client)
    finally:
        client.close()


if __name__ == "__main__":
    main()
