"""
どこで: `engine.tunable` パッケージの公開入口。
何を: ValueStore/BindingRegistry/SpecDocument などチューニング spec 機構の主要型を再輸出。
なぜ: 外部（`api.tunable`）へ薄い入口を提供し、内部実装の入れ替えを容易にするため。
"""

from common.errors import (
    ColorParseError,
    KeyNotFoundError,
    ManifestParseError,
    TunableSpecError,
    TypeMismatchError,
)

from .binding import Binding, BindingRegistry
from .cache import NamedCache
from .document import SpecDocument, load_manifest, save_manifest
from .state import ValueEntry, ValueKind, ValueStore

__all__ = [
    "Binding",
    "BindingRegistry",
    "NamedCache",
    "SpecDocument",
    "load_manifest",
    "save_manifest",
    "ValueEntry",
    "ValueKind",
    "ValueStore",
    "TunableSpecError",
    "ManifestParseError",
    "ColorParseError",
    "KeyNotFoundError",
    "TypeMismatchError",
]
