"""
どこで: `common.settings`
何を: チューニング spec 関連の環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を避け、既定値/型の一貫性とテスト容易性を保つため。

環境変数:
- `TSP_RESOURCE_DIR`: `<name>.json` マニフェストを探すディレクトリ。
- `TSP_LOG_LEVEL`: `setup_default_logging()` の既定レベル。
- `TSP_WARN_ON_SKIP`: 不正エントリのスキップを WARNING で出すか（0 で DEBUG に落とす）。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_str


@dataclass
class _Settings:
    RESOURCE_DIR: str | None = None
    LOG_LEVEL: str = "INFO"
    WARN_ON_SKIP: bool = True


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。"""
    _settings.RESOURCE_DIR = env_str("TSP_RESOURCE_DIR")
    _settings.LOG_LEVEL = (env_str("TSP_LOG_LEVEL", "INFO") or "INFO").upper()
    _settings.WARN_ON_SKIP = env_bool("TSP_WARN_ON_SKIP", True)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
