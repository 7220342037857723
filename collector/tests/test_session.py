"""session モジュールのモックテスト."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from waitsync.config import StoreSettings
from waitsync.errors import AuthError
from waitsync.session import StoreSession


def _client(expires_at=2000) -> MagicMock:
    client = MagicMock()
    client.auth.sign_in_with_password.return_value = SimpleNamespace(
        session=SimpleNamespace(access_token="token", expires_at=expires_at)
    )
    return client


class TestEnsureValid:
    """ensure_valid のテスト."""

    def test_login_when_no_session(self):
        client = _client()
        session = StoreSession(client, "bot@example.com", "secret", clock=lambda: 1000)

        assert session.is_valid() is False
        current = session.ensure_valid()

        client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "bot@example.com", "password": "secret"}
        )
        assert current.access_token == "token"
        assert session.is_valid() is True

    def test_reuse_valid_session(self):
        """有効なセッションがあれば再ログインしないこと."""
        client = _client()
        session = StoreSession(client, "bot@example.com", "secret", clock=lambda: 1000)

        session.ensure_valid()
        session.ensure_valid()

        assert client.auth.sign_in_with_password.call_count == 1

    def test_relogin_when_expired(self):
        now = [1000]
        client = _client(expires_at=2000)
        session = StoreSession(client, "bot@example.com", "secret", leeway=60, clock=lambda: now[0])

        session.ensure_valid()
        now[0] = 1950  # 期限の 60 秒前を過ぎた
        session.ensure_valid()

        assert client.auth.sign_in_with_password.call_count == 2

    def test_login_failure(self):
        client = MagicMock()
        cause = RuntimeError("Invalid login credentials")
        client.auth.sign_in_with_password.side_effect = cause
        session = StoreSession(client, "bot@example.com", "wrong")

        with pytest.raises(AuthError, match="Invalid login credentials") as exc_info:
            session.ensure_valid()

        assert exc_info.value.__cause__ is cause
        assert session.is_valid() is False

    def test_no_session_returned(self):
        client = MagicMock()
        client.auth.sign_in_with_password.return_value = SimpleNamespace(session=None)

        with pytest.raises(AuthError):
            StoreSession(client, "bot@example.com", "secret").ensure_valid()


class TestTable:
    """table のテスト."""

    def test_schema(self):
        client = MagicMock()
        session = StoreSession(client, "bot@example.com", "secret", schema="wait_times")

        session.table("rides")

        client.schema.assert_called_once_with("wait_times")
        client.schema.return_value.table.assert_called_once_with("rides")


class TestFromSettings:
    """from_settings のテスト."""

    @patch("waitsync.session.create_client")
    def test_creates_client(self, mock_create):
        settings = StoreSettings(
            url="https://xyz.supabase.co", key="anon-key",
            email="bot@example.com", password="secret",
        )

        session = StoreSession.from_settings(settings)

        mock_create.assert_called_once_with("https://xyz.supabase.co", "anon-key")
        assert session.client is mock_create.return_value
