from __future__ import annotations

import pytest

from common.errors import ColorParseError, KeyNotFoundError, TypeMismatchError
from engine.tunable import SpecDocument, ValueStore
from engine.tunable.state import ValueEntry, double_bounds, kind_of
from util.color import Color, parse_color

from tests._utils.owners import Owner


def _grid_store() -> ValueStore:
    return SpecDocument().import_from(
        [{"key": "Grid", "sliderValue": 175, "sliderMinValue": 10, "sliderMaxValue": 300}]
    )


def test_grid_scenario_clamps_and_notifies(owner: Owner) -> None:
    store = _grid_store()
    assert store.get("Grid", "double") == 175

    store.bind("Grid", owner, lambda o, v: o.received.append(v))
    assert store.set("Grid", 1000) == 300
    assert store.get("Grid", "double") == 300
    assert owner.received == [175, 300]


def test_set_clamps_below_min() -> None:
    store = _grid_store()
    assert store.set("Grid", -4) == 10


def test_set_unchanged_value_does_not_notify(owner: Owner) -> None:
    store = _grid_store()
    store.bind("Grid", owner, lambda o, v: o.received.append(v))
    store.set("Grid", 175)
    store.set("Grid", 175.0)
    assert owner.received == [175]

    # クランプ後に同値となる場合も通知しない
    store.set("Grid", 1000)
    store.set("Grid", 5000)
    assert owner.received == [175, 300]


def test_get_reports_missing_key_and_kind_mismatch() -> None:
    store = _grid_store()
    with pytest.raises(KeyNotFoundError) as info:
        store.get("Missing", "double")
    assert info.value.key == "Missing"
    assert isinstance(info.value, KeyError)

    with pytest.raises(TypeMismatchError) as mismatch:
        store.get("Grid", "bool")
    assert (mismatch.value.expected, mismatch.value.actual) == ("bool", "double")
    with pytest.raises(TypeMismatchError):
        store.get("Grid", "color")


def test_set_rejects_other_kinds() -> None:
    store = _grid_store()
    # bool は int のサブクラスだが double としては扱わない
    with pytest.raises(TypeMismatchError):
        store.set("Grid", True)
    with pytest.raises(TypeMismatchError):
        store.set("Grid", "#FFFFFF")
    assert store.get("Grid", "double") == 175


def test_set_creates_entries_for_new_keys() -> None:
    store = ValueStore()
    store.set("Speed", 2)
    store.set("Flag", True)
    store.set("Tint", "#FF0000")
    assert store.get("Speed", "double") == 2.0
    assert store.get("Flag", "bool") is True
    assert store.get("Tint", "color") == Color(1.0, 0.0, 0.0, 1.0)
    assert store.keys() == ["Speed", "Flag", "Tint"]
    # 新規 double は上下限なし
    assert store.entry("Speed").bounds == (None, None)


def test_bool_and_color_change_detection(owner: Owner) -> None:
    store = SpecDocument().import_from(
        [
            {"key": "Sound", "switchValue": False},
            {"key": "Back", "colorValue": "#39CCCC"},
        ]
    )
    sound = Owner("sound")
    store.bind("Sound", sound, lambda o, v: o.received.append(v))
    store.set("Sound", False)
    store.set("Sound", True)
    assert sound.received == [False, True]

    store.bind("Back", owner, lambda o, v: o.received.append(v))
    store.set("Back", "57,204,204")  # 同じ色（別文法）
    store.set("Back", parse_color("rgba(0,0,0,0.5)"))
    assert owner.received == [parse_color("#39CCCC"), parse_color("rgba(0,0,0,0.5)")]

    with pytest.raises(ColorParseError):
        store.set("Back", "nope")


@pytest.mark.parametrize(
    "value, min_max, expected",
    [
        (4, [], (0.0, 8.0)),
        (4, [1], (0.0, 1.0)),
        (4, [2, 9], (2.0, 9.0)),
        (0, [], (None, None)),
        (-3, (), (None, None)),
    ],
)
def test_double_bounds_rules(value, min_max, expected) -> None:
    assert double_bounds(value, min_max) == expected


def test_double_bounds_rejects_more_than_two_elements() -> None:
    with pytest.raises(ValueError):
        double_bounds(1.0, [1, 2, 3])


def test_add_double_creates_and_overwrites(owner: Owner) -> None:
    store = ValueStore()
    entry = store.add_double("Speed", 4, [])
    assert entry.bounds == (0.0, 8.0)
    assert store.get("Speed", "double") == 4.0

    store.bind("Speed", owner, lambda o, v: o.received.append(v))
    entry = store.add_double("Speed", 4, [1])
    # 値は変わらないので通知しない。上下限のみ更新
    assert entry.bounds == (0.0, 1.0)
    assert owner.received == [4.0]

    store.add_double("Speed", 5, [2, 9])
    assert store.entry("Speed").bounds == (2.0, 9.0)
    assert owner.received == [4.0, 5.0]
    # 以降の set は新しいレンジでクランプされる
    assert store.set("Speed", 20) == 9.0


def test_add_double_on_other_kind_is_rejected() -> None:
    store = ValueStore()
    store.set("Flag", True)
    with pytest.raises(TypeMismatchError):
        store.add_double("Flag", 1.0)
    with pytest.raises(TypeMismatchError):
        store.add_double("Other", True)  # type: ignore[arg-type]


def test_snapshot_is_read_only_copy() -> None:
    store = _grid_store()
    snap = store.snapshot()
    assert dict(snap) == {"Grid": 175}
    with pytest.raises(TypeError):
        snap["Grid"] = 1  # type: ignore[index]
    store.set("Grid", 200)
    assert snap["Grid"] == 175
    assert store.snapshot()["Grid"] == 200


def test_kind_of_and_entry_helpers() -> None:
    assert kind_of(True) == "bool"
    assert kind_of(1) == "double"
    assert kind_of(Color(0, 0, 0)) == "color"
    with pytest.raises(TypeError):
        kind_of(None)

    entry = ValueEntry(key="k", kind="double", value=1.0, min_value=0.0)
    assert entry.display_label == "k"
    assert entry.clamp(-1.0) == 0.0
    assert entry.clamp(99.0) == 99.0


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_set_rejects_non_finite_double(owner: Owner, bad: float) -> None:
    store = _grid_store()
    store.bind("Grid", owner, lambda o, v: o.received.append(v))
    with pytest.raises(ValueError):
        store.set("Grid", bad)
    # 値は変わらず、通知も起きない
    assert store.get("Grid", "double") == 175
    assert owner.received == [175]


def test_add_double_rejects_nan() -> None:
    store = _grid_store()
    with pytest.raises(ValueError):
        store.add_double("Speed", float("nan"))
    with pytest.raises(ValueError):
        store.add_double("Speed", 1.0, (0.0, float("nan")))
    assert "Speed" not in store
