"""db モジュールのモックテスト."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from waitsync.db import RideStore
from waitsync.errors import ParkNotFoundError, StoreWriteError
from waitsync.models import CanonicalRide

STAMP = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def _chain() -> MagicMock:
    """select().eq()... のメソッドチェーンを模したモック."""
    chain = MagicMock()
    for method in ("select", "eq", "order", "range", "limit", "insert", "update"):
        getattr(chain, method).return_value = chain
    return chain


def _store(chain: MagicMock, page_size: int = 500) -> RideStore:
    session = MagicMock()
    session.table.return_value = chain
    return RideStore(session, page_size=page_size)


def _ride() -> CanonicalRide:
    return CanonicalRide(
        name="Space Mountain", wait_time=45, is_open=True,
        last_api_update=STAMP, updated_at=STAMP,
    )


class TestGetParkRecord:
    """get_park_record のテスト."""

    def test_found(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(
            data=[{"id": "rec-6", "api_id": "6", "name": "Magic Kingdom"}]
        )
        store = _store(chain)

        record = store.get_park_record("6")

        store.session.table.assert_called_once_with("parks")
        chain.eq.assert_called_once_with("api_id", "6")
        assert record.id == "rec-6"
        assert record.name == "Magic Kingdom"

    def test_not_found(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(data=[])

        with pytest.raises(ParkNotFoundError, match="No park record found for id 99"):
            _store(chain).get_park_record("99")


class TestGetRides:
    """get_rides のテスト."""

    def test_single_page(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(data=[
            {"id": "r1", "park_id": "rec-6", "name": "Space Mountain", "wait_time": 45, "is_open": True},
        ])
        store = _store(chain)

        rides = store.get_rides("rec-6")

        store.session.table.assert_called_with("rides")
        chain.eq.assert_called_once_with("park_id", "rec-6")
        chain.range.assert_called_once_with(0, 499)
        assert len(rides) == 1
        assert rides[0].name == "Space Mountain"
        assert rides[0].wait_time == 45

    def test_pages_until_short_page(self):
        """ページサイズ未満のページが返るまで続けて取得すること."""
        chain = _chain()
        rows = [{"id": f"r{i}", "park_id": "rec-6", "name": f"Ride {i}"} for i in range(5)]
        chain.execute.side_effect = [
            MagicMock(data=rows[0:2]),
            MagicMock(data=rows[2:4]),
            MagicMock(data=rows[4:5]),
        ]

        rides = _store(chain, page_size=2).get_rides("rec-6")

        assert [r.id for r in rides] == ["r0", "r1", "r2", "r3", "r4"]
        assert [c.args for c in chain.range.call_args_list] == [(0, 1), (2, 3), (4, 5)]

    def test_empty(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(data=[])

        assert _store(chain).get_rides("rec-6") == []


class TestSaveRide:
    """save_ride のテスト."""

    def test_create(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(data=[])

        _store(chain).save_ride(_ride(), "rec-6")

        chain.insert.assert_called_once_with({
            "name": "Space Mountain",
            "wait_time": 45,
            "is_open": True,
            "last_api_update": "2023-11-14T22:13:20+00:00",
            "updated_at": "2023-11-14T22:13:20+00:00",
            "park_id": "rec-6",
        })
        chain.update.assert_not_called()

    def test_update(self):
        chain = _chain()
        chain.execute.return_value = MagicMock(data=[])

        _store(chain).save_ride(_ride(), "rec-6", ride_id="r1")

        chain.update.assert_called_once_with(_ride().to_record())
        chain.eq.assert_called_once_with("id", "r1")
        chain.insert.assert_not_called()

    def test_write_error(self):
        chain = _chain()
        cause = RuntimeError("permission denied")
        chain.execute.side_effect = cause

        with pytest.raises(StoreWriteError, match="Space Mountain") as exc_info:
            _store(chain).save_ride(_ride(), "rec-6")

        assert exc_info.value.__cause__ is cause
