from __future__ import annotations

from typing import Dict

from .config import get_config


# Runtime overrides; take precedence over `Config.active_features`
_overrides: Dict[str, bool] = {}


def _norm(name: str) -> str:
    return str(name).strip().lower()


def feature_active(name: str) -> bool:
    key = _norm(name)
    if key in _overrides:
        return _overrides[key]
    return key in get_config().active_features


def feature_inactive(name: str) -> bool:
    return not feature_active(name)


def activate(name: str) -> None:
    _overrides[_norm(name)] = True


def deactivate(name: str) -> None:
    _overrides[_norm(name)] = False


def reset() -> None:
    """Drop all runtime overrides."""
    _overrides.clear()
