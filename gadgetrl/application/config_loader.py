from pathlib import Path
from typing import Any

import yaml

from gadgetrl.domain.constants import CONFIG_DIRNAME, CONFIG_FILENAME, DEFAULT_MAX_REDIRECTS


class ConfigLoadError(Exception):
    def __init__(self, message: str, *, path: Path | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


def _defaults() -> dict[str, Any]:
    return {
        "max_redirects": DEFAULT_MAX_REDIRECTS,
        "review_styles": False,
        "snapshot": None,  # Default: <project>/.gadgetrl/site.yml, resolved by the CLI
        "log_level": "WARNING",
    }


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge mapping keys. For non-dict values, overlay wins."""
    merged: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _deep_merge(merged[k], v)  # type: ignore[arg-type]
        else:
            merged[k] = v
    return merged


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    """
    Load YAML file and ensure root is a mapping. A missing file is empty.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except Exception as e:  # pragma: no cover
        raise ConfigLoadError("Failed to read config file", path=path, cause=e) from e

    try:
        data = yaml.safe_load(raw)
    except Exception as e:
        raise ConfigLoadError("Malformed YAML", path=path, cause=e) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigLoadError("YAML root must be a mapping", path=path)

    return data


def load_config(*, project_root: Path | None = None, user_home: Path | None = None) -> dict[str, Any]:
    """
    Load and merge config with precedence (highest wins):
    CLI args (handled in CLI) > project > user > defaults.

    Files:
      - user:    user_home/.gadgetrl/config.yml
      - project: project_root/.gadgetrl/config.yml

    A relative ``snapshot`` path in the project file is resolved against
    project_root.
    """
    project_root = project_root or Path.cwd()
    user_home = user_home or Path.home()

    cfg: dict[str, Any] = _defaults()

    user_cfg = load_yaml_mapping(user_home / CONFIG_DIRNAME / CONFIG_FILENAME)
    cfg = _deep_merge(cfg, user_cfg)

    project_cfg = load_yaml_mapping(project_root / CONFIG_DIRNAME / CONFIG_FILENAME)
    snapshot = project_cfg.get("snapshot")
    if isinstance(snapshot, str) and not Path(snapshot).is_absolute():
        project_cfg["snapshot"] = str(project_root / snapshot)
    cfg = _deep_merge(cfg, project_cfg)

    return cfg
