from pathlib import Path
from typing import Any, Dict

import yaml

from common import settings


def _safe_load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _find_project_root(start: Path) -> Path:
    """プロジェクトルートを推定して返す。

    - `src/` 配下から呼ばれることを想定し、上位に `.git` や `pyproject.toml`、`configs/` がある
      もっとも近いディレクトリを返す。
    - 見つからない場合は `start.parent.parent` をフォールバックとして返す。
    """
    cur = start.resolve()
    for parent in [cur] + list(cur.parents):
        if (
            (parent / ".git").exists()
            or (parent / "pyproject.toml").exists()
            or (parent / "configs").exists()
        ):
            return parent
    # 典型: <repo>/src/util/utils.py -> <repo>
    return cur.parent.parent


def load_config() -> Dict[str, Any]:
    """構成を読み込んで辞書で返す（フェイルソフト）。

    優先順:
    1) `configs/default.yaml`（ベース）
    2) ルート `config.yaml`（ベースに上書き）

    - いずれも存在しない/不正な場合は空辞書を返す。
    - ネストした辞書のディープマージは行わず、トップレベルのみ上書き。
    """
    project_root = _find_project_root(Path(__file__).parent)
    base: Dict[str, Any] = {}

    default_path = project_root / "configs" / "default.yaml"
    if default_path.exists():
        base.update(_safe_load_yaml(default_path))

    root_config_path = project_root / "config.yaml"
    if root_config_path.exists():
        base.update(_safe_load_yaml(root_config_path))

    return base


def tunable_config() -> Dict[str, Any]:
    """`tunable_spec` セクションを返す（未定義/不正は空辞書）。"""
    cfg = load_config() or {}
    section = cfg.get("tunable_spec", {}) if isinstance(cfg, dict) else {}
    return section if isinstance(section, dict) else {}


def resolve_resource_dir(explicit: str | Path | None = None) -> Path:
    """マニフェスト `<name>.json` を探すディレクトリを決める。

    優先順: 引数 > 環境変数 `TSP_RESOURCE_DIR` > 設定 `tunable_spec.resource_dir`
    > `<project root>/resources`。引数以外の相対パスはプロジェクトルート基準。
    """
    if explicit is not None:
        return Path(explicit).expanduser()
    project_root = _find_project_root(Path(__file__).parent)
    candidate: str | None = settings.get().RESOURCE_DIR
    if candidate is None:
        raw = tunable_config().get("resource_dir")
        if isinstance(raw, str) and raw.strip():
            candidate = raw.strip()
    if candidate is None:
        return project_root / "resources"
    path = Path(candidate).expanduser()
    return path if path.is_absolute() else project_root / path
