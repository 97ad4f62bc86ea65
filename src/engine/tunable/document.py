"""
どこで: `engine.tunable` の入出力層。
何を: マニフェスト（JSON 配列）⇔ ValueStore の変換（SpecDocument）と、ファイル読み書きヘルパ。
なぜ: 宣言ファイルから実行時ストアを組み立て、調整後の値を同じスキーマで書き戻すため。

仕様（要点）:
- 種別は payload フィールドの有無だけで決める: `sliderValue` → double, `switchValue` → bool,
  `colorValue`（文字列 or 文字列配列） → color。
- 不正なエントリ（key 欠落、種別が曖昧、payload 型不正、色が解析不能、key 重複）は
  `ManifestParseError` として記録・ログ出力してスキップし、残りの読み込みを続ける。
- 未知フィールドは `ValueEntry.extras` に保持し、書き出し時に戻す。
- 書き出しの `colorValue` は常に正規形 `rgba(R,G,B,A)` の単一文字列。
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Mapping

from common import settings
from common.errors import ColorParseError, ManifestParseError
from util.color import Color, format_color, parse_color_representation

from .state import ValueEntry, ValueKind, ValueStore

logger = logging.getLogger(__name__)

KEY_FIELD = "key"
LABEL_FIELD = "label"
SLIDER_VALUE = "sliderValue"
SLIDER_MIN = "sliderMinValue"
SLIDER_MAX = "sliderMaxValue"
SWITCH_VALUE = "switchValue"
COLOR_VALUE = "colorValue"

_PAYLOAD_FIELDS: dict[str, ValueKind] = {
    SLIDER_VALUE: "double",
    SWITCH_VALUE: "bool",
    COLOR_VALUE: "color",
}
# 種別ごとに解釈するフィールド。それ以外は extras として保持する
_KIND_FIELDS: dict[ValueKind, frozenset[str]] = {
    "double": frozenset({KEY_FIELD, LABEL_FIELD, SLIDER_VALUE, SLIDER_MIN, SLIDER_MAX}),
    "bool": frozenset({KEY_FIELD, LABEL_FIELD, SWITCH_VALUE}),
    "color": frozenset({KEY_FIELD, LABEL_FIELD, COLOR_VALUE}),
}


def _is_number(value: Any) -> bool:
    # json.load は NaN/Infinity を受理するため有限値に限る
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _parse_color_payload(raw: Any, *, index: int, key: str) -> Color:
    """`colorValue` を解析する。配列は先頭から順に試し、最初に解析できたものを採用。"""
    if isinstance(raw, str):
        candidates = [raw]
    elif isinstance(raw, list) and raw and all(isinstance(v, str) for v in raw):
        candidates = list(raw)
    else:
        raise ManifestParseError(
            f"colorValue must be a string or a non-empty array of strings: {raw!r}",
            index=index,
            key=key,
        )
    last: ColorParseError | None = None
    for text in candidates:
        try:
            return parse_color_representation(text)
        except ColorParseError as e:
            last = e
    raise ManifestParseError(f"no parseable colorValue: {last}", index=index, key=key) from last


def parse_entry(raw: Any, index: int = 0) -> ValueEntry:
    """1 エントリを ValueEntry に変換する。不正なら ManifestParseError。"""
    if not isinstance(raw, Mapping):
        raise ManifestParseError(f"entry must be an object, got {type(raw).__name__}", index=index)
    key = raw.get(KEY_FIELD)
    if not isinstance(key, str) or not key:
        raise ManifestParseError("entry is missing a string 'key'", index=index, key=key)
    label = raw.get(LABEL_FIELD)
    if label is not None and not isinstance(label, str):
        raise ManifestParseError("'label' must be a string", index=index, key=key)

    present = [name for name in _PAYLOAD_FIELDS if name in raw]
    if len(present) != 1:
        raise ManifestParseError(
            f"entry must have exactly one of {sorted(_PAYLOAD_FIELDS)}, found {present}",
            index=index,
            key=key,
        )
    field_name = present[0]
    kind = _PAYLOAD_FIELDS[field_name]
    payload = raw[field_name]
    extras = {k: v for k, v in raw.items() if k not in _KIND_FIELDS[kind]}

    if kind == "double":
        if not _is_number(payload):
            raise ManifestParseError(f"sliderValue must be a finite number: {payload!r}", index=index, key=key)
        bounds: list[float | None] = []
        for name in (SLIDER_MIN, SLIDER_MAX):
            bound = raw.get(name)
            if bound is not None and not _is_number(bound):
                raise ManifestParseError(f"{name} must be a number: {bound!r}", index=index, key=key)
            bounds.append(float(bound) if bound is not None else None)
        return ValueEntry(
            key=key,
            kind="double",
            value=float(payload),
            label=label,
            min_value=bounds[0],
            max_value=bounds[1],
            extras=extras,
        )
    if kind == "bool":
        if not isinstance(payload, bool):
            raise ManifestParseError(f"switchValue must be a boolean: {payload!r}", index=index, key=key)
        return ValueEntry(key=key, kind="bool", value=payload, label=label, extras=extras)
    color = _parse_color_payload(payload, index=index, key=key)
    return ValueEntry(key=key, kind="color", value=color, label=label, extras=extras)


def export_entry(entry: ValueEntry) -> dict[str, Any]:
    """ValueEntry をマニフェストの 1 エントリ（dict）へ戻す。"""
    out: dict[str, Any] = {KEY_FIELD: entry.key}
    if entry.label is not None:
        out[LABEL_FIELD] = entry.label
    if entry.kind == "double":
        out[SLIDER_VALUE] = entry.value
        if entry.min_value is not None:
            out[SLIDER_MIN] = entry.min_value
        if entry.max_value is not None:
            out[SLIDER_MAX] = entry.max_value
    elif entry.kind == "bool":
        out[SWITCH_VALUE] = bool(entry.value)
    else:
        out[COLOR_VALUE] = format_color(entry.value)
    for k, v in entry.extras.items():
        out.setdefault(k, v)
    return out


class SpecDocument:
    """マニフェストとストアの相互変換。

    `skipped` には直近の `import_from` でスキップしたエントリの例外が入る。
    """

    def __init__(self) -> None:
        self.skipped: list[ManifestParseError] = []

    def import_from(self, entries: Any, store: ValueStore | None = None) -> ValueStore:
        """エントリ列を検証しつつ ValueStore に投入する。"""
        if not isinstance(entries, list):
            raise ManifestParseError(
                f"manifest must be a JSON array, got {type(entries).__name__}"
            )
        store = store if store is not None else ValueStore()
        self.skipped = []
        seen: set[str] = set()
        for index, raw in enumerate(entries):
            try:
                entry = parse_entry(raw, index)
                if entry.key in seen:
                    raise ManifestParseError(
                        f"duplicate key {entry.key!r}", index=index, key=entry.key
                    )
            except ManifestParseError as e:
                self.skipped.append(e)
                self._log_skip(e)
                continue
            seen.add(entry.key)
            store.seed(entry)
        logger.debug("imported %d entries (%d skipped)", len(seen), len(self.skipped))
        return store

    @staticmethod
    def _log_skip(error: ManifestParseError) -> None:
        level = logging.WARNING if settings.get().WARN_ON_SKIP else logging.DEBUG
        logger.log(level, "skipping manifest entry #%s: %s", error.index, error)

    @staticmethod
    def export_to(store: ValueStore) -> list[dict[str, Any]]:
        """ストアの現在値をマニフェスト形式（dict のリスト）で返す。"""
        return [export_entry(entry) for entry in store.entries()]


def load_manifest(path: str | Path) -> list[Any]:
    """JSON マニフェストを読み込む。JSON 不正/配列以外は ManifestParseError。"""
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestParseError(f"malformed JSON in {p}: {e}") from e
    if not isinstance(data, list):
        raise ManifestParseError(f"manifest {p} must be a JSON array")
    return data


def save_manifest(path: str | Path, entries: Iterable[Mapping[str, Any]]) -> Path:
    """マニフェストを丸ごと書き出す（部分更新はしない）。"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump([dict(e) for e in entries], f, ensure_ascii=False, indent=2)
        f.write("\n")
    return p


__all__ = [
    "SpecDocument",
    "export_entry",
    "load_manifest",
    "parse_entry",
    "save_manifest",
]
