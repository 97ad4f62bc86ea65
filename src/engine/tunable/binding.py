"""
どこで: `engine.tunable` の購読層。
何を: キーごとに (owner, callback) の束縛を登録順で保持し、値変更時に通知する BindingRegistry。
なぜ: 依存する UI/状態を値の編集に追従させつつ、owner の寿命には一切干渉しないため。

設計要点:
- owner は `weakref.ref` でのみ保持する。owner が回収された束縛は以後呼ばれず、遅延で掃除される。
- callback が owner 自身の bound method の場合は `weakref.WeakMethod` で保持する（owner を強参照しない）。
  呼び出しは常に `callback(owner, value)` で、owner と同時に束縛も無効になる。
- 同じ (owner, key) の再束縛は置き換えず追加する。
- callback の例外はそのまま送出し、同じキーの残りの束縛は通知しない。
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

MaintainCallback = Callable[[Any, Any], None]


@dataclass(eq=False)
class Binding:
    """1 件の束縛（キー・owner への弱参照・callback）。"""

    key: str
    owner_ref: weakref.ref
    callback_ref: Callable[[], MaintainCallback | None]

    def resolve(self) -> tuple[Any, MaintainCallback] | None:
        """生存していれば (owner, callback) を返す。owner が回収済みなら None。"""
        owner = self.owner_ref()
        if owner is None:
            return None
        callback = self.callback_ref()
        if callback is None:
            return None
        return owner, callback

    @property
    def alive(self) -> bool:
        return self.resolve() is not None


def _callback_ref(owner: Any, callback: MaintainCallback) -> Callable[[], MaintainCallback | None]:
    if getattr(callback, "__self__", None) is owner and hasattr(callback, "__func__"):
        return weakref.WeakMethod(callback)  # type: ignore[arg-type]
    return lambda: callback


class BindingRegistry:
    """キー → 束縛列（登録順）を管理する。"""

    def __init__(self) -> None:
        self._bindings: dict[str, list[Binding]] = {}

    def bind(self, key: str, owner: Any, callback: MaintainCallback, value: Any) -> Binding:
        """束縛を末尾に追加し、直ちに `callback(owner, value)` を 1 度呼ぶ。"""
        if not callable(callback):
            raise TypeError("callback must be callable")
        try:
            owner_ref = weakref.ref(owner)
        except TypeError as e:
            raise TypeError(
                f"owner of type {type(owner).__name__} cannot be weakly referenced"
            ) from e
        binding = Binding(key=key, owner_ref=owner_ref, callback_ref=_callback_ref(owner, callback))
        self._bindings.setdefault(key, []).append(binding)
        logger.debug("bind key=%s owner=%s", key, type(owner).__name__)
        callback(owner, value)
        return binding

    def notify(self, key: str, value: Any) -> int:
        """生存中の束縛を登録順に呼び出し、呼び出し件数を返す。"""
        bindings = self._bindings.get(key)
        if not bindings:
            return 0
        called = 0
        dead = False
        # 通知中の bind/prune に影響されないようコピーを走査する
        for binding in list(bindings):
            resolved = binding.resolve()
            if resolved is None:
                dead = True
                continue
            owner, cb = resolved
            cb(owner, value)
            called += 1
        if dead:
            self._prune_key(key)
        return called

    def _prune_key(self, key: str) -> int:
        bindings = self._bindings.get(key)
        if not bindings:
            return 0
        live = [b for b in bindings if b.alive]
        removed = len(bindings) - len(live)
        if live:
            self._bindings[key] = live
        else:
            del self._bindings[key]
        if removed:
            logger.debug("pruned %d dead binding(s) for key=%s", removed, key)
        return removed

    def prune(self) -> int:
        """owner が回収済みの束縛をすべて取り除き、件数を返す。"""
        return sum(self._prune_key(key) for key in list(self._bindings))

    def live_count(self, key: str) -> int:
        return sum(1 for b in self._bindings.get(key, ()) if b.alive)

    def keys(self) -> list[str]:
        return list(self._bindings)


__all__ = ["Binding", "BindingRegistry", "MaintainCallback"]
