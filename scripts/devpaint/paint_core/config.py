"""Settings resolution: built-in defaults, JSON config file, environment."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

DEFAULTS: dict[str, Any] = {
    "program_name": "Snowpack",
    "install_title": "snowpack install",
    "install_hold_seconds": 2.0,
    "port": 8080,
    "scripts": [],
    "add_package_command": None,
    "log_level": "WARNING",
    "log_file": None,
}

PACKAGE_PLACEHOLDER = "{pkg}"


def env_config_path() -> str | None:
    return os.environ.get("DEVPAINT_CONFIG") or None


def env_defaults() -> dict[str, Any]:
    values: dict[str, Any] = {}
    port = os.environ.get("DEVPAINT_PORT")
    if port:
        try:
            values["port"] = int(port)
        except ValueError as exc:
            raise ValueError(f"invalid DEVPAINT_PORT: {port}") from exc
    level = os.environ.get("DEVPAINT_LOG_LEVEL")
    if level:
        values["log_level"] = level
    return values


def load_user_config(path: str | None) -> dict:
    if not path:
        return {}

    config_path = Path(path)
    if not config_path.exists():
        raise ValueError(f"config path not found: {config_path}")

    try:
        data = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON config: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("config must be a JSON object")
    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ValueError(f"unknown config key: {unknown[0]}")
    return data


def _normalize(resolved: dict[str, Any]) -> dict[str, Any]:
    resolved["install_hold_seconds"] = max(0.0, float(resolved["install_hold_seconds"]))

    port = int(resolved["port"])
    if not 0 < port <= 65535:
        raise ValueError(f"port out of range: {port}")
    resolved["port"] = port

    scripts = resolved["scripts"]
    if not isinstance(scripts, list) or not all(isinstance(s, str) for s in scripts):
        raise ValueError("scripts must be a list of names")

    command = resolved["add_package_command"]
    if command is not None:
        if isinstance(command, str):
            command = command.split()
        if not isinstance(command, list) or not command:
            raise ValueError("add_package_command must be a non-empty command")
        if not any(PACKAGE_PLACEHOLDER in part for part in command):
            command = [*command, PACKAGE_PLACEHOLDER]
        resolved["add_package_command"] = [str(part) for part in command]
    return resolved


def resolve_config(config_path: str | None = None, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Defaults, then environment, then config file, then non-None overrides."""
    resolved = dict(DEFAULTS)
    resolved.update(env_defaults())
    resolved.update(load_user_config(config_path or env_config_path()))
    for key, value in (overrides or {}).items():
        if key not in DEFAULTS:
            raise ValueError(f"unknown setting: {key}")
        if value is not None:
            resolved[key] = value
    return _normalize(resolved)
