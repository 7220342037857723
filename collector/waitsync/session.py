"""Supabase セッション管理.

ログイン状態はこのオブジェクトが保持し、RideStore に渡して使う。
ensure_valid() はセッションが有効ならそのまま返し、無効・期限切れなら再ログインする。
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from supabase import Client, create_client

from waitsync.config import SESSION_EXPIRY_LEEWAY, STORE_SCHEMA, StoreSettings
from waitsync.errors import AuthError

logger = logging.getLogger(__name__)


class StoreSession:
    """認証済み Supabase クライアントを提供する."""

    def __init__(
        self,
        client: Client,
        email: str,
        password: str,
        schema: str = STORE_SCHEMA,
        leeway: float = SESSION_EXPIRY_LEEWAY,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.schema = schema
        self._email = email
        self._password = password
        self._leeway = leeway
        self._clock = clock
        self._session: Any = None

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> StoreSession:
        return cls(create_client(settings.url, settings.key), settings.email, settings.password)

    def is_valid(self) -> bool:
        """現在のセッションが期限内か."""
        if self._session is None:
            return False
        expires_at = getattr(self._session, "expires_at", None)
        if expires_at is None:
            return True
        return expires_at - self._leeway > self._clock()

    def ensure_valid(self) -> Any:
        """有効なセッションを返す。必要なら再ログインする.

        Raises:
            AuthError: ログインに失敗した場合
        """
        if self.is_valid():
            return self._session

        try:
            resp = self.client.auth.sign_in_with_password(
                {"email": self._email, "password": self._password}
            )
        except Exception as e:
            logger.error("Supabase 認証失敗: %s", e)
            raise AuthError(f"Supabase 認証に失敗しました: {e}") from e

        if resp is None or resp.session is None:
            raise AuthError("Supabase 認証に失敗しました: セッションが返されませんでした")

        self._session = resp.session
        logger.info("Supabase に再ログインしました")
        return self._session

    def table(self, name: str):
        """スキーマ指定済みのテーブルを参照する."""
        return self.client.schema(self.schema).table(name)
