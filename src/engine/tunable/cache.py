"""
どこで: `engine.tunable` のキャッシュ層。
何を: 名前 → インスタンスを初回アクセス時に 1 度だけ生成して保持する NamedCache。
なぜ: 同じ spec 名で別インスタンスが生まれると束縛状態が分岐するため、
      同時の初回アクセスでも生成を 1 回に限る。

補足:
- 明示的な破棄 API は持たない（プロセス寿命で保持）。`_clear()` はテスト専用。
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NamedCache(Generic[T]):
    """ロックで保護した create-once マップ。"""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}
        self._lock = Lock()

    def get_or_create(self, name: str, factory: Callable[[str], T]) -> T:
        """`name` のインスタンスを返す。未生成なら `factory(name)` で作る。

        factory が例外を送出した場合はキャッシュせず、そのまま送出する。
        """
        with self._lock:
            item = self._items.get(name)
            if item is None:
                item = factory(name)
                self._items[name] = item
                logger.debug("created cached instance for name=%s", name)
            return item

    def get(self, name: str) -> T | None:
        with self._lock:
            return self._items.get(name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def names(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def _clear(self) -> None:
        with self._lock:
            self._items.clear()


__all__ = ["NamedCache"]
