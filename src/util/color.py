"""
どこで: `util.color`。
何を: 色指定の解析/整形（Hex, 成分リスト 0–1/0–255, `rgba(...)` 関数形式）を一元化。
なぜ: マニフェストの入力文法が混在していても、内部では単一の正規形（RGBA 0–1）で扱い、
      書き出しは常に同じ文字列形式に揃えるため。

受理文法（上から順に試し、最初に構文一致したものを採用）:
1. Hex: "#RRGGBB", "#RRGGBBAA"（"0x" 接頭辞も可、大文字/小文字は不問）。
2. 成分リスト: "r, g, b[, a]"。全要素が 1.0 以下なら 0–1 とみなし、そうでなければ
   r/g/b を 0–255（a は 0–1 のまま）として扱う。
3. 関数形式: "rgba(r,g,b,a)" / "rgb(r,g,b)"。r/g/b は 0–255、a は 0–1。

書き出しは常に `rgba(R,G,B,A)`（R/G/B は 0–255 の整数、A は小数 3 桁）。
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from common.errors import ColorParseError

ALPHA_DECIMALS = 3

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_HEX_RE = re.compile(r"^(?:#|0[xX])(?P<hex>[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_LIST_RE = re.compile(rf"^\s*{_NUMBER}\s*(?:,\s*{_NUMBER}\s*){{2,3}}$")
_FUNC_RE = re.compile(r"^(?P<name>rgba?)\s*\((?P<body>[^()]*)\)$", re.IGNORECASE)
# 旧形式の表示用文字列（"#717C64, Alpha: 1.000" など）
_LEGACY_ALPHA_RE = re.compile(rf"^(?P<body>.*?)\s*,\s*alpha\s*:\s*(?P<alpha>{_NUMBER})$", re.IGNORECASE)


def _clamp01(x: float) -> float:
    # -0.0 は +0.0 に揃える
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else float(x) + 0.0


def _to_u8(x: float) -> int:
    return int(round(_clamp01(x) * 255))


@dataclass(frozen=True)
class Color:
    """正規形の色（各チャネル 0–1 の float）。"""

    r: float
    g: float
    b: float
    a: float = 1.0

    def __post_init__(self) -> None:
        # frozen のため object.__setattr__ で正規化する
        for name in ("r", "g", "b", "a"):
            v = float(getattr(self, name))
            if math.isnan(v):
                raise ValueError(f"color channel {name} is NaN")
            object.__setattr__(self, name, _clamp01(v))

    @classmethod
    def from_u8(cls, r: int, g: int, b: int, a: float = 1.0) -> "Color":
        """0–255 の RGB と 0–1 のアルファから生成する。"""
        return cls(r / 255.0, g / 255.0, b / 255.0, a)

    def to_u8(self) -> tuple[int, int, int, int]:
        """RGBA(0–255) を返す。"""
        return (_to_u8(self.r), _to_u8(self.g), _to_u8(self.b), _to_u8(self.a))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


def _parse_hex(text: str) -> Color | None:
    m = _HEX_RE.match(text)
    if m is None:
        return None
    t = m.group("hex")
    r = int(t[0:2], 16)
    g = int(t[2:4], 16)
    b = int(t[4:6], 16)
    a = int(t[6:8], 16) / 255.0 if len(t) == 8 else 1.0
    return Color.from_u8(r, g, b, a)


def _parse_list(text: str) -> Color | None:
    if _LIST_RE.match(text) is None:
        return None
    values = [float(tok) for tok in text.split(",")]
    if not all(math.isfinite(v) for v in values):
        raise ColorParseError(text, "non-finite numeric component")
    # 全要素が 1.0 以下なら正規化済み（0–1）とみなす
    if all(v <= 1.0 for v in values):
        r, g, b = values[:3]
        a = values[3] if len(values) == 4 else 1.0
        return Color(r, g, b, a)
    a = values[3] if len(values) == 4 else 1.0
    return Color.from_u8(values[0], values[1], values[2], a)  # type: ignore[arg-type]


def _parse_functional(text: str) -> Color | None:
    m = _FUNC_RE.match(text)
    if m is None:
        return None
    name = m.group("name").lower()
    tokens = [tok.strip() for tok in m.group("body").split(",")]
    expected = 4 if name == "rgba" else 3
    if len(tokens) != expected:
        raise ColorParseError(text, f"{name}() takes {expected} components, got {len(tokens)}")
    try:
        values = [float(tok) for tok in tokens]
    except ValueError as e:
        raise ColorParseError(text, "malformed numeric component") from e
    if not all(math.isfinite(v) for v in values):
        raise ColorParseError(text, "non-finite numeric component")
    a = values[3] if expected == 4 else 1.0
    return Color.from_u8(values[0], values[1], values[2], a)  # type: ignore[arg-type]


_GRAMMARS = (_parse_hex, _parse_list, _parse_functional)


def parse_color(text: str) -> Color:
    """色文字列を正規形 `Color` に解析する。

    いずれの文法にも一致しない場合は `ColorParseError` を送出する。
    """
    if not isinstance(text, str):
        raise ColorParseError(text, f"expected str, got {type(text).__name__}")
    t = text.strip()
    for grammar in _GRAMMARS:
        color = grammar(t)
        if color is not None:
            return color
    raise ColorParseError(text)


def parse_color_representation(text: str) -> Color:
    """旧形式の表示用文字列（末尾 ", Alpha: x"）も受理する `parse_color`。

    例: "#717C64, Alpha: 1.000", "113, 124, 100, Alpha: 1.000"
    """
    if isinstance(text, str):
        m = _LEGACY_ALPHA_RE.match(text.strip())
        if m is not None:
            try:
                base = parse_color(m.group("body"))
            except ColorParseError:
                base = None
            if base is not None:
                return Color(base.r, base.g, base.b, float(m.group("alpha")))
    return parse_color(text)


def format_color(color: Color) -> str:
    """正規形の書き出し文字列 `rgba(R,G,B,A)` を返す。"""
    r, g, b, _ = color.to_u8()
    return f"rgba({r},{g},{b},{color.a:.{ALPHA_DECIMALS}f})"


def color_representations(color: Color) -> list[str]:
    """表示/コピー用の複数表現（Hex, 0–255, 0–1, 関数形式）を返す。"""
    r, g, b, _ = color.to_u8()
    alpha = f"Alpha: {color.a:.{ALPHA_DECIMALS}f}"
    return [
        f"#{r:02X}{g:02X}{b:02X}, {alpha}",
        f"{r}, {g}, {b}, {alpha}",
        f"{color.r:.3f}, {color.g:.3f}, {color.b:.3f}, {alpha}",
        format_color(color),
    ]


__all__ = [
    "ALPHA_DECIMALS",
    "Color",
    "parse_color",
    "parse_color_representation",
    "format_color",
    "color_representations",
]
