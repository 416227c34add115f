"""Read request vector sets and write responses (JSON or YAML)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import ErrorCode, err

YAML_SUFFIXES = (".yaml", ".yml")


class PlainDumper(yaml.SafeDumper):
    pass


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=None)


PlainDumper.add_representer(str, _str_representer)


def prune(obj: Any) -> Any:
    """Drop None values from nested mappings."""
    if isinstance(obj, dict):
        return {k: prune(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [prune(v) for v in obj]
    return obj


def load_document(path: Path) -> Any:
    text = path.read_text()
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise err(ErrorCode.MALFORMED_INPUT, f"{path}: {exc}") from exc


def dump_document(data: Any, fmt: str = "json", pretty: bool = True) -> str:
    data = prune(data)
    if fmt == "yaml":
        return yaml.dump(data, Dumper=PlainDumper, sort_keys=False, width=4096)
    if pretty:
        return json.dumps(data, indent=2) + "\n"
    return json.dumps(data, separators=(",", ":"))


def write_document(path: Path, data: Any, pretty: bool = True) -> None:
    fmt = "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_document(data, fmt, pretty))
