"""
どこで: `api` 入口（高レベル公開 API）。
何を: `TunableSpec`・`spec_named`・色型 `Color` と例外型を再輸出。
なぜ: 利用者が単一名前空間から spec の取得→束縛→書き出しまで完結できるようにするため。

Usage:
    from api import spec_named

    spec = spec_named("MainSpec")
    spacing = spec.double_for_key("GridSpacing")
    spec.with_bool_for_key("EnableClickySounds", player, lambda owner, on: owner.set_muted(not on))
"""

from common.errors import (
    ColorParseError,
    KeyNotFoundError,
    ManifestParseError,
    TunableSpecError,
    TypeMismatchError,
)
from util.color import Color, format_color, parse_color

from .tunable import TunableSpec, spec_named

__all__ = [
    # メインAPI
    "TunableSpec",
    "spec_named",
    # 色
    "Color",
    "parse_color",
    "format_color",
    # 例外
    "TunableSpecError",
    "ManifestParseError",
    "ColorParseError",
    "KeyNotFoundError",
    "TypeMismatchError",
]

# バージョン情報
__version__ = "2026.10"
