"""
どこで: `common` パッケージ。
何を: util/engine/api の各層で共有する軽量基盤（例外階層・環境変数・ロギング）。
なぜ: 下位層（util）と上位層（engine/api）が同じ例外型を使えるよう、依存の向きを単純化するため。
"""

from .errors import (
    ColorParseError,
    KeyNotFoundError,
    ManifestParseError,
    TunableSpecError,
    TypeMismatchError,
)

__all__ = [
    "TunableSpecError",
    "ManifestParseError",
    "ColorParseError",
    "KeyNotFoundError",
    "TypeMismatchError",
]
