from __future__ import annotations

"""チューニング spec API（公開 `TunableSpec` / `spec_named`）。

どこで: `api.tunable`。
何を: JSON マニフェストで宣言した値の取得・束縛（maintain）・追加・書き出しを 1 つのオブジェクトで提供する。
なぜ: 利用側が `spec_named("MainSpec").double_for_key("GridSpacing")` のように、
      ファイル読み込みや束縛管理を意識せずに値へアクセスできるようにするため。

使用例:
    spec = spec_named("MainSpec")
    spec.with_double_for_key("LabelText", view, lambda owner, v: owner.set_text(f"{v:g}"))

束縛の callback は owner を第 1 引数で受け取る。owner を callback 内にキャプチャすると
owner が回収されなくなるため、必ず引数の owner を使うこと。
"""

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from common.errors import ManifestParseError
from engine.tunable import NamedCache, SpecDocument, ValueStore, load_manifest, save_manifest
from engine.tunable.binding import Binding
from engine.tunable.state import ValueEntry
from util.color import Color, color_representations, format_color
from util.utils import resolve_resource_dir

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".json"


class TunableSpec:
    """1 つのマニフェストに対応する実行時チューニング spec。"""

    def __init__(
        self,
        entries: Sequence[Any] = (),
        *,
        name: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        self.name = name
        self.path = Path(path) if path is not None else None
        self._document = SpecDocument()
        manifest = list(entries) if isinstance(entries, (list, tuple)) else entries
        self._store: ValueStore = self._document.import_from(manifest)

    @classmethod
    def from_file(cls, path: str | Path, *, name: str | None = None) -> "TunableSpec":
        """JSON マニフェストファイルから生成する。"""
        p = Path(path)
        return cls(load_manifest(p), name=name or p.stem, path=p)

    @property
    def store(self) -> ValueStore:
        return self._store

    @property
    def skipped(self) -> list[ManifestParseError]:
        """読み込み時にスキップしたエントリの ManifestParseError 一覧。"""
        return list(self._document.skipped)

    # --- 取得 ---
    def double_for_key(self, key: str) -> float:
        return self._store.get(key, "double")

    def bool_for_key(self, key: str) -> bool:
        return self._store.get(key, "bool")

    def color_for_key(self, key: str) -> Color:
        return self._store.get(key, "color")

    # --- 束縛（maintain） ---
    def with_double_for_key(
        self, key: str, owner: Any, maintain: Callable[[Any, float], None]
    ) -> Binding:
        return self._store.bind(key, owner, maintain, kind="double")

    def with_bool_for_key(
        self, key: str, owner: Any, maintain: Callable[[Any, bool], None]
    ) -> Binding:
        return self._store.bind(key, owner, maintain, kind="bool")

    def with_color_for_key(
        self, key: str, owner: Any, maintain: Callable[[Any, Color], None]
    ) -> Binding:
        return self._store.bind(key, owner, maintain, kind="color")

    # --- 更新 ---
    def set_value(self, key: str, value: Any) -> Any:
        """チューニング UI 等からの値更新（クランプ/通知は ValueStore が担う）。"""
        return self._store.set(key, value)

    def add_double(self, label: str, value: float, min_max: Sequence[float] = ()) -> ValueEntry:
        return self._store.add_double(label, value, min_max)

    # --- 表現 / 書き出し ---
    def dictionary_representation(self) -> Mapping[str, Any]:
        """キー → 現在値の読み取り専用ビュー（レイアウト用メトリクス等に使う）。"""
        return self._store.snapshot()

    as_mapping = dictionary_representation

    def export_entries(self) -> list[dict[str, Any]]:
        return SpecDocument.export_to(self._store)

    def save(self, path: str | Path | None = None) -> Path:
        """現在値でマニフェストを丸ごと書き出す。既定は読み込み元のファイル。"""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("no path given and spec was not loaded from a file")
        out = save_manifest(target, self.export_entries())
        logger.info("saved tunable spec %s to %s", self.name or "<unnamed>", out)
        return out

    def dump_state(self) -> dict[str, dict[str, Any]]:
        """デバッグ用: 各キーの種別・値・表示用表現・生存束縛数。"""
        result: dict[str, dict[str, Any]] = {}
        for key, info in self._store.dump_state().items():
            entry: ValueEntry = info["entry"]
            if entry.kind == "color":
                display: Any = color_representations(entry.value)
                value: Any = format_color(entry.value)
            else:
                display = entry.value
                value = entry.value
            result[key] = {
                "label": entry.display_label,
                "kind": entry.kind,
                "value": value,
                "display": display,
                "bounds": entry.bounds,
                "bindings": info["bindings"],
            }
        return result

    def __repr__(self) -> str:
        return f"TunableSpec(name={self.name!r}, keys={len(self._store)})"


_SPECS: NamedCache[TunableSpec] = NamedCache()


def spec_named(name: str, *, resource_dir: str | Path | None = None) -> TunableSpec:
    """`<resource_dir>/<name>.json` の TunableSpec を返す（プロセス内で名前ごとに 1 つ）。

    初回のみファイルを読み込み、以降は同じインスタンスを返す。ファイルが無ければ
    FileNotFoundError をそのまま送出する。
    """

    def _load(spec_name: str) -> TunableSpec:
        path = resolve_resource_dir(resource_dir) / f"{spec_name}{MANIFEST_SUFFIX}"
        logger.debug("loading tunable spec %s from %s", spec_name, path)
        return TunableSpec.from_file(path, name=spec_name)

    return _SPECS.get_or_create(name, _load)


__all__ = ["TunableSpec", "spec_named"]
