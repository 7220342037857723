"""例外定義.

パーク単位のエラー (FetchError / ParkNotFoundError / StoreWriteError) は
バッチ実行側で捕捉・記録され、AuthError はティック全体を中止する。
"""


class SyncError(Exception):
    """同期処理の基底例外."""


class ConfigError(SyncError):
    """設定値の不足・不正."""


class FetchError(SyncError):
    """queue-times.com からの取得失敗、またはレスポンス構造の不正."""


class ParkNotFoundError(SyncError):
    """設定済みパークに対応する parks レコードが存在しない."""


class StoreWriteError(SyncError):
    """rides レコードの作成・更新に失敗."""


class AuthError(SyncError):
    """Supabase への再ログインに失敗."""
