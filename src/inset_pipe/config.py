from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

import logging

from inset_pipe.schema import InsetParams


log = logging.getLogger(__name__)


def _norm_path_str(p: str) -> str:
    """Use forward slashes so YAML files move between OSes unchanged."""
    return str(p).replace("\\", "/")


def resolve_path(p: str | Path, *, base_dir: Path) -> Path:
    pp = Path(_norm_path_str(str(p))).expanduser()
    return pp if pp.is_absolute() else (base_dir / pp).resolve()


def load_config(cfg_path: str | Path) -> dict[str, Any]:
    """Load a YAML parameter file.

    Adds:
      - config_path (absolute)
      - config_dir (absolute)

    ``image`` and ``output`` paths, when present, are resolved relative to the
    config file directory. Everything else is left as written so the dict can
    be validated by :func:`inset_pipe.schema.schema_validate`.
    """
    cfg_path = Path(cfg_path).expanduser().resolve()
    cfg_dir = cfg_path.parent
    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(cfg, dict):
        raise TypeError(f"Config {cfg_path} must be a mapping, got {type(cfg).__name__}")

    cfg["config_path"] = str(cfg_path)
    cfg["config_dir"] = str(cfg_dir)

    for key in ("image", "output"):
        if cfg.get(key):
            cfg[key] = str(resolve_path(cfg[key], base_dir=cfg_dir))

    log.debug("Loaded config %s (%d keys)", cfg_path, len(cfg))
    return cfg


def load_config_any(cfg: Any) -> dict[str, Any]:
    """Load config from a path, a dict, or an :class:`InsetParams`."""
    if isinstance(cfg, (str, Path)):
        return load_config(cfg)
    if isinstance(cfg, dict):
        return cfg
    if isinstance(cfg, InsetParams):
        return cfg.model_dump()

    for attr in ("cfg_path", "config_path"):
        if hasattr(cfg, attr):
            return load_config(getattr(cfg, attr))

    raise TypeError(f"Unsupported config type: {type(cfg)}")


def params_from_config(cfg: Any) -> InsetParams:
    """Typed parameters from anything :func:`load_config_any` accepts.

    Raises ``pydantic.ValidationError`` on bad values; unknown keys pass
    through silently (run ``check-config`` to list them).
    """
    if isinstance(cfg, InsetParams):
        return cfg
    return InsetParams.model_validate(load_config_any(cfg))


def _normalize_cfg_paths_for_yaml(obj: Any):
    if isinstance(obj, dict):
        return {k: _normalize_cfg_paths_for_yaml(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize_cfg_paths_for_yaml(v) for v in obj]
    if isinstance(obj, str):
        return obj.replace("\\", "/")
    return obj


def write_config(cfg: dict[str, Any] | InsetParams, out_path: str | Path) -> None:
    if isinstance(cfg, InsetParams):
        cfg = cfg.model_dump()
    # injected by load_config; meaningless once the file moves
    cfg = {k: v for k, v in cfg.items() if k not in {"config_path", "config_dir"}}

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as f:
        cfg_norm = _normalize_cfg_paths_for_yaml(cfg)
        yaml.safe_dump(cfg_norm, f, sort_keys=False, allow_unicode=True)
