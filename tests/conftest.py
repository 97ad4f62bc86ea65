"""共通フィクスチャ。

- 代表的なマニフェスト（slider/switch/color の 3 種）
- spec 名キャッシュと環境変数由来設定のリセット
"""

from __future__ import annotations

from typing import Any, Iterator

import pytest

from common import settings
from tests._utils.owners import Owner


@pytest.fixture()
def manifest_entries() -> list[dict[str, Any]]:
    return [
        {
            "sliderMaxValue": 300,
            "key": "GridSpacing",
            "label": "Grid Spacing",
            "sliderValue": 175,
            "sliderMinValue": 10,
        },
        {
            "key": "EnableClickySounds",
            "label": "Clicky Sounds",
            "switchValue": False,
        },
        {"colorValue": "0.58, 0., 0.28, 1", "key": "aColor", "label": "viewBack"},
        {"colorValue": "45, 124, 100", "key": "Color", "label": "shapeBack"},
        {"colorValue": "#39CCCC", "key": "bColor", "label": "shapeBorder"},
    ]


@pytest.fixture()
def owner() -> Owner:
    return Owner()


@pytest.fixture()
def reset_spec_cache() -> Iterator[None]:
    from api import tunable

    tunable._SPECS._clear()
    yield
    tunable._SPECS._clear()


@pytest.fixture()
def env_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """環境変数を設定してから `settings.reload_from_env()` を呼ぶためのヘルパ。"""
    yield monkeypatch
    monkeypatch.undo()
    settings.reload_from_env()
