"""
どこで: `common.settings`
何を: プロジェクトの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int


@dataclass
class _Settings:
    # ラベル jitter 用の共有乱数の種（None は OS エントロピー）
    LABEL_JITTER_SEED: int | None = None

    # スキップ（属性欠落/退化境界/範囲外 index）を DEBUG ログへ出すか
    DEBUG_SKIPS: bool = False


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - `DSGV_LABEL_JITTER_SEED`: 負値は 0 に丸める。未設定/不正は None。
    - `DSGV_DEBUG_SKIPS`: 0/1, true/false。
    """
    _settings.LABEL_JITTER_SEED = env_int("DSGV_LABEL_JITTER_SEED", None, min_value=0)
    _settings.DEBUG_SKIPS = env_bool("DSGV_DEBUG_SKIPS", False)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
