from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

STORAGE_DIR = ".agentstore"
AGENT_DIR = "agents"
AGENT_FILE = "store.json"
ENV_FILENAME = ".env"

DEFAULT_LOCK_TIMEOUT_S = 10.0
DEFAULT_LOG_LEVEL = "INFO"

SETTING_KEYS = {
    "AGENTSTORE_PROJECT_ROOT",
    "AGENTSTORE_STORE_PATH",
    "AGENTSTORE_LOCK_TIMEOUT_S",
    "AGENTSTORE_LOG_LEVEL",
}
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class StoreSettings:
    project_root: Path
    store_path: Path
    lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S
    log_level: str = DEFAULT_LOG_LEVEL

    def as_dict(self) -> dict[str, Any]:
        return {
            "project_root": str(self.project_root),
            "store_path": str(self.store_path),
            "lock_timeout_s": self.lock_timeout_s,
            "log_level": self.log_level,
        }


def default_store_path(project_root: Path) -> Path:
    return project_root / STORAGE_DIR / AGENT_DIR / AGENT_FILE


def parse_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("'\"")
    return values


def collect_values(environ: Mapping[str, str] | None = None, env_path: Path | None = None) -> dict[str, str]:
    """Merge ``.env`` values with the process environment; the environment wins."""
    source = os.environ if environ is None else environ
    root_hint = str(source.get("AGENTSTORE_PROJECT_ROOT", "")).strip()
    if env_path is None:
        env_path = (Path(root_hint) if root_hint else Path.cwd()) / ENV_FILENAME
    values = {key: value for key, value in parse_env(env_path).items() if key in SETTING_KEYS}
    for key in SETTING_KEYS:
        if key in source:
            values[key] = str(source[key]).strip()
    return values


def _parse_timeout(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if value < 0:
        return None
    return value


def validate_settings(values: Mapping[str, str]) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    timeout_raw = values.get("AGENTSTORE_LOCK_TIMEOUT_S", "").strip()
    if timeout_raw and _parse_timeout(timeout_raw) is None:
        errors.append(f"AGENTSTORE_LOCK_TIMEOUT_S must be a non-negative number: {timeout_raw}")

    level = values.get("AGENTSTORE_LOG_LEVEL", "").strip().upper()
    if level and level not in VALID_LOG_LEVELS:
        errors.append(f"Unsupported log level: {level}")

    root = values.get("AGENTSTORE_PROJECT_ROOT", "").strip()
    if root and not Path(root).is_dir():
        warnings.append(f"AGENTSTORE_PROJECT_ROOT does not exist yet: {root}")

    if values.get("AGENTSTORE_STORE_PATH", "").strip() and root:
        warnings.append("AGENTSTORE_STORE_PATH is set; AGENTSTORE_PROJECT_ROOT is ignored for the store location")

    return {"ok": len(errors) == 0, "errors": errors, "warnings": warnings}


def load_settings(environ: Mapping[str, str] | None = None, env_path: Path | None = None) -> StoreSettings:
    values = collect_values(environ, env_path)

    root_raw = values.get("AGENTSTORE_PROJECT_ROOT", "").strip()
    project_root = Path(root_raw).expanduser() if root_raw else Path.cwd()

    store_raw = values.get("AGENTSTORE_STORE_PATH", "").strip()
    store_path = Path(store_raw).expanduser() if store_raw else default_store_path(project_root)

    timeout = _parse_timeout(values.get("AGENTSTORE_LOCK_TIMEOUT_S", "").strip() or str(DEFAULT_LOCK_TIMEOUT_S))
    level = values.get("AGENTSTORE_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    if level not in VALID_LOG_LEVELS:
        level = DEFAULT_LOG_LEVEL

    return StoreSettings(
        project_root=project_root,
        store_path=store_path,
        lock_timeout_s=DEFAULT_LOCK_TIMEOUT_S if timeout is None else timeout,
        log_level=level,
    )


def configure_logging(settings: StoreSettings) -> None:
    logging.getLogger("agentstore").setLevel(getattr(logging, settings.log_level))


__all__ = [
    "SETTING_KEYS",
    "StoreSettings",
    "collect_values",
    "configure_logging",
    "default_store_path",
    "load_settings",
    "parse_env",
    "validate_settings",
]
