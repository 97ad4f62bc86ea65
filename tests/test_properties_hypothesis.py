import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a dev optional dependency")
from hypothesis import assume, given, strategies as st  # type: ignore

from engine.tunable import SpecDocument
from util.color import (
    Color,
    color_representations,
    format_color,
    parse_color,
    parse_color_representation,
)

u8 = st.integers(0, 255)
alpha_milli = st.integers(0, 1000)


@given(r=u8, g=u8, b=u8, am=alpha_milli)
def test_format_is_idempotent(r, g, b, am):
    c = Color.from_u8(r, g, b, am / 1000)
    s = format_color(c)
    assert format_color(parse_color(s)) == s


@given(r=u8, g=u8, b=u8)
def test_three_grammars_agree(r, g, b):
    # 全成分 1 以下の成分リストは 0–1 とみなされるため除外
    assume(max(r, g, b) > 1)
    hex_s = f"#{r:02X}{g:02X}{b:02X}"
    list_s = f"{r}, {g}, {b}"
    func_s = f"rgba({r},{g},{b},1)"
    outs = {format_color(parse_color(s)) for s in (hex_s, list_s, func_s)}
    assert outs == {f"rgba({r},{g},{b},1.000)"}


@given(r=u8, g=u8, b=u8, a=u8)
def test_hex_alpha_matches_functional_form(r, g, b, a):
    hex_c = parse_color(f"#{r:02X}{g:02X}{b:02X}{a:02X}")
    func_c = parse_color(f"rgba({r},{g},{b},{a / 255:.3f})")
    assert format_color(hex_c) == format_color(func_c)


@given(r=u8, g=u8, b=u8, am=alpha_milli)
def test_legacy_representations_reparse(r, g, b, am):
    c = Color.from_u8(r, g, b, am / 1000)
    hex_repr, _, unit_repr, func_repr = color_representations(c)
    for text in (hex_repr, unit_repr, func_repr):
        assert format_color(parse_color_representation(text)) == format_color(c)


@given(
    value=st.floats(-1e6, 1e6, allow_nan=False),
    lo=st.floats(-1e3, 0),
    hi=st.floats(1, 1e3),
)
def test_set_always_lands_inside_declared_bounds(value, lo, hi):
    store = SpecDocument().import_from(
        [{"key": "v", "sliderValue": 0.5, "sliderMinValue": lo, "sliderMaxValue": hi}]
    )
    stored = store.set("v", value)
    assert lo <= stored <= hi
    assert store.get("v", "double") == stored
