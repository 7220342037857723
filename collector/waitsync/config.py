"""設定モジュール — 環境変数・定数定義."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from waitsync.errors import ConfigError
from waitsync.models import Park

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- 対象パーク (queue-times.com のパーク ID) ---
PARKS: tuple[Park, ...] = (
    Park(park_id="5", name="EPCOT"),
    Park(park_id="6", name="Magic Kingdom"),
    Park(park_id="7", name="Disney's Hollywood Studios"),
    Park(park_id="8", name="Disney's Animal Kingdom"),
)

# --- queue-times.com ---
QUEUE_TIMES_URL_TEMPLATE = "https://queue-times.com/parks/{park_id}/queue_times.json"
USER_AGENT = "queue-waitsync/0.1 (wait time collector)"
REQUEST_TIMEOUT = 15  # 秒

# --- スケジュール ---
SYNC_INTERVAL_SECONDS = 5 * 60

# --- Supabase ---
STORE_SCHEMA = os.getenv("SUPABASE_SCHEMA", "public")
STORE_PAGE_SIZE = 500
SESSION_EXPIRY_LEEWAY = 60  # 秒。期限切れ直前のセッションは再ログインする

# --- ログ ---
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"


@dataclass(frozen=True)
class StoreSettings:
    """Supabase 接続情報."""

    url: str
    key: str
    email: str
    password: str

    @classmethod
    def from_env(cls) -> StoreSettings:
        """環境変数から接続情報を読み込む.

        Raises:
            ConfigError: 必須の環境変数が未設定の場合
        """
        names = ("SUPABASE_URL", "SUPABASE_KEY", "SUPABASE_EMAIL", "SUPABASE_PASSWORD")
        missing = [n for n in names if not os.getenv(n)]
        if missing:
            raise ConfigError(f"環境変数が未設定です: {', '.join(missing)}")
        return cls(
            url=os.environ["SUPABASE_URL"],
            key=os.environ["SUPABASE_KEY"],
            email=os.environ["SUPABASE_EMAIL"],
            password=os.environ["SUPABASE_PASSWORD"],
        )
