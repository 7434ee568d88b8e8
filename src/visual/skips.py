"""
どこで: `visual.skips`。
何を: 「スキップして続行」した寄与の DEBUG ログ出力。
なぜ: 部分的に構築途中のグラフでは欠落が大量に起こり得るため、`DSGV_DEBUG_SKIPS` で明示的に
      有効化したときだけ記録する。
"""

from __future__ import annotations

import logging

from common import settings


def log_skip(logger: logging.Logger, msg: str, *args: object) -> None:
    if settings.get().DEBUG_SKIPS:
        logger.debug(msg, *args)


__all__ = ["log_skip"]
