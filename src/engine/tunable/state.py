"""
どこで: `engine.tunable` の状態管理層。
何を: キー → 型付き値（double/bool/color）の唯一の真実源 ValueStore と、その 1 レコード ValueEntry。
なぜ: マニフェストで宣言した値を実行時に書き換え、束縛先へ一貫して伝えるため。

補足:
- 読み出しは種別を厳密に照合する（double を bool として読む等の暗黙変換はしない）。
- `set()` は宣言済みの min/max があればクランプし、値が変わった時だけ通知する。
- `set()`/`bind()`/通知は 1 つの RLock の内側で行う（read-modify-notify を不可分にする）。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Any, Iterator, Literal, Mapping, Sequence

from common.errors import KeyNotFoundError, TypeMismatchError
from util.color import Color, parse_color

from .binding import Binding, BindingRegistry, MaintainCallback

logger = logging.getLogger(__name__)

ValueKind = Literal["double", "bool", "color"]


@dataclass
class ValueEntry:
    """ストアの 1 レコード。

    `min_value`/`max_value` は double のみ。スライダー表示用のメタだが、`set()` のクランプにも使う。
    `extras` はマニフェストの未知フィールドで、書き出し時にそのまま戻す。
    """

    key: str
    kind: ValueKind
    value: Any
    label: str | None = None
    min_value: float | None = None
    max_value: float | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def display_label(self) -> str:
        return self.label if self.label else self.key

    @property
    def bounds(self) -> tuple[float | None, float | None]:
        return (self.min_value, self.max_value)

    def clamp(self, value: float) -> float:
        if self.min_value is not None and value < self.min_value:
            return float(self.min_value)
        if self.max_value is not None and value > self.max_value:
            return float(self.max_value)
        return value


def kind_of(value: Any) -> ValueKind:
    """Python 値から種別を推定する（bool は int より先に判定）。"""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "double"
    if isinstance(value, (Color, str)):
        return "color"
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def coerce_value(key: str, kind: ValueKind, value: Any) -> Any:
    """`value` を `kind` の保存形へ揃える。種別が合わなければ TypeMismatchError。"""
    actual = kind_of(value)
    if actual != kind:
        raise TypeMismatchError(key, expected=kind, actual=actual)
    if kind == "double":
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"{key}: double value must be finite, got {number!r}")
        return number
    if kind == "color" and isinstance(value, str):
        return parse_color(value)
    return value


def double_bounds(value: float, min_max: Sequence[float] = ()) -> tuple[float | None, float | None]:
    """`add_double` のレンジ規則。

    - 要素 0: value > 0 なら (0, 2*value)、それ以外は上下限なし
    - 要素 1: (0, max)
    - 要素 2: (min, max)
    """
    bounds = [float(v) for v in min_max]
    if any(math.isnan(v) for v in bounds):
        raise ValueError(f"min_max must not contain NaN: {min_max!r}")
    if not bounds:
        if value > 0:
            return (0.0, 2.0 * float(value))
        return (None, None)
    if len(bounds) == 1:
        return (0.0, bounds[0])
    if len(bounds) == 2:
        return (bounds[0], bounds[1])
    raise ValueError(f"min_max takes at most 2 elements, got {len(bounds)}")


class ValueStore:
    """宣言済みの値と束縛を集中管理する。"""

    def __init__(self) -> None:
        self._entries: dict[str, ValueEntry] = {}
        self._bindings = BindingRegistry()
        self._lock = RLock()

    # --- 登録 / 問合せ ---
    def seed(self, entry: ValueEntry) -> None:
        """宣言済みエントリを登録する（インポート用、通知しない）。"""
        with self._lock:
            self._entries[entry.key] = entry

    def entry(self, key: str) -> ValueEntry:
        with self._lock:
            try:
                return self._entries[key]
            except KeyError:
                raise KeyNotFoundError(key) from None

    def entries(self) -> list[ValueEntry]:
        with self._lock:
            return list(self._entries.values())

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    @property
    def bindings(self) -> BindingRegistry:
        return self._bindings

    # --- 値操作 ---
    def get(self, key: str, kind: ValueKind) -> Any:
        """`kind` を照合して現在値を返す。"""
        entry = self.entry(key)
        if entry.kind != kind:
            raise TypeMismatchError(key, expected=kind, actual=entry.kind)
        return entry.value

    def set(self, key: str, value: Any) -> Any:
        """値を更新し、変化があれば束縛へ通知する。保存された値を返す。

        未知キーは `value` の型から種別を推定して新規作成する。
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                kind = kind_of(value)
                stored = coerce_value(key, kind, value)
                self._entries[key] = ValueEntry(key=key, kind=kind, value=stored)
                logger.debug("set: created key=%s kind=%s", key, kind)
                self._bindings.notify(key, stored)
                return stored
            stored = coerce_value(key, entry.kind, value)
            if entry.kind == "double":
                stored = entry.clamp(stored)
            if stored == entry.value:
                return stored
            entry.value = stored
            logger.debug("set: key=%s value=%r", key, stored)
            self._bindings.notify(key, stored)
            return stored

    def add_double(self, label: str, value: float, min_max: Sequence[float] = ()) -> ValueEntry:
        """double エントリを `label` をキーとして作成/上書きする。"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatchError(label, expected="double", actual=kind_of(value))
        value = coerce_value(label, "double", value)
        lo, hi = double_bounds(value, min_max)
        with self._lock:
            entry = self._entries.get(label)
            if entry is None:
                entry = ValueEntry(
                    key=label, kind="double", value=float(value), min_value=lo, max_value=hi
                )
                self._entries[label] = entry
                return entry
            if entry.kind != "double":
                raise TypeMismatchError(label, expected="double", actual=entry.kind)
            entry.min_value = lo
            entry.max_value = hi
            if entry.value != float(value):
                entry.value = float(value)
                self._bindings.notify(label, entry.value)
            return entry

    def bind(
        self,
        key: str,
        owner: Any,
        callback: MaintainCallback,
        kind: ValueKind | None = None,
    ) -> Binding:
        """束縛を登録し、現在値で 1 度だけ即時に呼び出す。"""
        with self._lock:
            entry = self.entry(key)
            if kind is not None and entry.kind != kind:
                raise TypeMismatchError(key, expected=kind, actual=entry.kind)
            return self._bindings.bind(key, owner, callback, entry.value)

    def snapshot(self) -> Mapping[str, Any]:
        """現在値の読み取り専用ビュー（コピー）を返す。"""
        with self._lock:
            return MappingProxyType({k: e.value for k, e in self._entries.items()})

    def dump_state(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {
                key: {"entry": entry, "bindings": self._bindings.live_count(key)}
                for key, entry in self._entries.items()
            }


__all__ = [
    "ValueEntry",
    "ValueKind",
    "ValueStore",
    "coerce_value",
    "double_bounds",
    "kind_of",
]
