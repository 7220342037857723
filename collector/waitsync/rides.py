"""アトラクション情報の正規化と差分判定.

正規化は入力がどんな形でも例外を出さず、必ず CanonicalRide を返す。
差分判定は待ち時間・運営状況・名前のみを比較し、タイムスタンプの変化だけでは
書き込みを発生させない (書き込み件数を抑えるため意図的に除外している)。
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from waitsync.models import CanonicalRide, RideObservation, StoredRide

UNKNOWN_RIDE_NAME = "Unknown Ride"

_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def normalize_ride(observation: RideObservation, now: datetime | None = None) -> CanonicalRide:
    """API のアトラクション 1 件を正規化する.

    last_api_update の決定順:
      1. last_updated が正の有限数値ならエポック秒として解釈
      2. 日付文字列として解釈できればその時刻
      3. どちらでもなければ処理時刻 (now)

    Args:
        observation: 生のアトラクション情報
        now: 処理時刻。省略時は現在時刻 (UTC)
    """
    if now is None:
        now = datetime.now(timezone.utc)

    return CanonicalRide(
        name=_normalize_name(observation.name),
        wait_time=_normalize_wait_time(observation.wait_time),
        is_open=bool(observation.is_open),
        last_api_update=_resolve_timestamp(observation.last_updated) or now,
        updated_at=now,
    )


def ride_changed(existing: StoredRide | None, incoming: CanonicalRide) -> bool:
    """保存済みレコードと比べて書き込みが必要か判定する.

    未登録 (existing が None) なら常に True。
    last_api_update / updated_at は比較しない。
    """
    if existing is None:
        return True
    return (
        existing.wait_time != incoming.wait_time
        or existing.is_open != incoming.is_open
        or existing.name != incoming.name
    )


def index_by_name(rides: list[StoredRide]) -> dict[str, StoredRide]:
    """保存済みアトラクションを名前で引けるようにする (同名は後勝ち)."""
    return {r.name: r for r in rides}


def _is_number(value: Any) -> bool:
    # bool は int のサブクラスなので除外する
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _normalize_name(value: Any) -> str:
    if isinstance(value, str):
        return value or UNKNOWN_RIDE_NAME
    if _is_number(value) and value:
        return str(value)
    return UNKNOWN_RIDE_NAME


def _normalize_wait_time(value: Any) -> int:
    if not _is_number(value):
        return 0
    # 巨大な int は float に変換できないので isfinite は float にだけ使う
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


def _resolve_timestamp(value: Any) -> datetime | None:
    if _is_number(value) and value > 0:
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            parsed = _parse_full_date(value)
            if parsed is None:
                return None
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
        except (ValueError, OverflowError):
            return None

    return None


def _parse_full_date(value: str) -> datetime | None:
    """年月日がすべて含まれる日付文字列だけを解釈する.

    dateutil は欠けた項目を default で補うため、異なる default で 2 回解釈して
    結果が一致しなければ年・月・日のどれかが欠けているとみなす。
    """
    first = date_parser.parse(value, default=_DEFAULT_A)
    second = date_parser.parse(value, default=_DEFAULT_B)
    if first != second:
        return None
    return first
