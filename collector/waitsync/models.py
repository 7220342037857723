"""データモデル定義."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Park:
    """同期対象のパーク."""

    park_id: str  # queue-times.com のパーク ID (例: "6")
    name: str  # 表示名


@dataclass
class RideObservation:
    """API から受け取ったままのアトラクション 1 件.

    各フィールドは型も有無も保証されない。正規化は rides.normalize_ride で行う。
    """

    name: Any = None
    wait_time: Any = None
    is_open: Any = None
    last_updated: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> RideObservation:
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            name=payload.get("name"),
            wait_time=payload.get("wait_time"),
            is_open=payload.get("is_open"),
            last_updated=payload.get("last_updated"),
        )


@dataclass
class CanonicalRide:
    """正規化済みのアトラクション情報."""

    name: str
    wait_time: int  # 分。0 以上
    is_open: bool
    last_api_update: datetime  # UTC
    updated_at: datetime  # UTC。正規化した時刻

    def to_record(self) -> dict:
        """rides テーブルへ書き込む形式に変換する."""
        return {
            "name": self.name,
            "wait_time": self.wait_time,
            "is_open": self.is_open,
            "last_api_update": self.last_api_update.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class ParkRecord:
    """parks テーブルの 1 行."""

    id: str  # Supabase 側の ID
    api_id: str  # queue-times.com のパーク ID
    name: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> ParkRecord:
        return cls(id=row["id"], api_id=str(row.get("api_id", "")), name=row.get("name"))


@dataclass
class StoredRide:
    """rides テーブルの 1 行."""

    id: str
    park_id: str
    name: str
    wait_time: int | None
    is_open: bool | None
    last_api_update: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> StoredRide:
        return cls(
            id=row["id"],
            park_id=row.get("park_id", ""),
            name=row.get("name", ""),
            wait_time=row.get("wait_time"),
            is_open=row.get("is_open"),
            last_api_update=row.get("last_api_update"),
            updated_at=row.get("updated_at"),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ParkSyncResult:
    """パーク 1 件分の同期結果."""

    park_id: str
    updated_rides: int  # 処理したアトラクション数
    saved_rides: int  # 実際に書き込んだ件数
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "park_id": self.park_id,
            "updated_rides": self.updated_rides,
            "saved_rides": self.saved_rides,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ParkFailure:
    """同期に失敗したパーク."""

    park_id: str
    error: str

    def to_dict(self) -> dict:
        return {"park_id": self.park_id, "error": self.error}


@dataclass
class BatchResult:
    """全パーク分の集計結果."""

    results: list[ParkSyncResult] = field(default_factory=list)
    failures: list[ParkFailure] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def total_processed(self) -> int:
        return sum(r.updated_rides for r in self.results)

    @property
    def total_saved(self) -> int:
        return sum(r.saved_rides for r in self.results)

    @property
    def parks_updated(self) -> int:
        return len(self.results)

    @property
    def parks_failed(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return self.parks_failed == 0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "total_processed": self.total_processed,
            "total_saved": self.total_saved,
            "parks_updated": self.parks_updated,
            "parks_failed": self.parks_failed,
            "results": [r.to_dict() for r in self.results],
            "failures": [f.to_dict() for f in self.failures],
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class TickResult:
    """スケジュール実行 1 回分の結果.

    失敗時は stage に "auth" か "batch" が入り、error に原因が入る。
    """

    success: bool
    stage: str | None = None
    batch: BatchResult | None = None
    error: str | None = None
