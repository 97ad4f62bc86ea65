"""
どこで: `common.errors`
何を: チューニング spec 全体で共有する例外階層（マニフェスト/色/キー/型）。
なぜ: util 層（色コーデック）と engine 層（ストア）が同じ例外型を送出できるようにするため。

方針:
- 読み出し時の `KeyNotFoundError`/`TypeMismatchError` はプログラミングエラーとして即時送出する。
- エントリ単位の `ManifestParseError` はインポート側で回収し、残りのエントリの読み込みを続ける。
"""

from __future__ import annotations

from typing import Any


class TunableSpecError(Exception):
    """チューニング spec 関連の例外の基底。"""


class ManifestParseError(TunableSpecError, ValueError):
    """マニフェスト（JSON 配列）またはその 1 エントリが不正。

    `index` はエントリ位置（文書全体の場合は None）、`key` は判明していればそのキー。
    """

    def __init__(self, message: str, *, index: int | None = None, key: Any = None) -> None:
        super().__init__(message)
        self.index = index
        self.key = key


class ColorParseError(TunableSpecError, ValueError):
    """どの色文法にも一致しない文字列。"""

    def __init__(self, text: Any, reason: str | None = None) -> None:
        msg = f"unrecognized color: {text!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.text = text
        self.reason = reason


class KeyNotFoundError(TunableSpecError, KeyError):
    """未宣言キーへのアクセス。"""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not declared in spec: {self.key!r}"


class TypeMismatchError(TunableSpecError, TypeError):
    """保存済みの種別と要求された種別が一致しない。"""

    def __init__(self, key: str, expected: str, actual: str) -> None:
        super().__init__(f"kind mismatch for {key!r}: stored {actual}, requested {expected}")
        self.key = key
        self.expected = expected
        self.actual = actual


__all__ = [
    "TunableSpecError",
    "ManifestParseError",
    "ColorParseError",
    "KeyNotFoundError",
    "TypeMismatchError",
]
