import json
from pathlib import Path

import yaml

from customs_worker.labels.exceptions import LabelOverrideError

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_label_overrides(path: Path) -> dict[str, str]:
    """Load a flat ``{raw label: canonical field}`` mapping from an override file.

    ``.json`` files are parsed as a JSON object and ``.yaml``/``.yml`` files
    as a YAML mapping. Any other extension is read as ``label: value`` lines,
    split at the first colon; blank lines and ``#`` comments are skipped.

    Raises:
        LabelOverrideError: if the file is missing, unreadable, malformed,
            or does not contain a mapping.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LabelOverrideError(f"Failed to read label overrides {path}: {exc}") from exc

    suffix = path.suffix.lower()
    if suffix == ".json":
        parsed = _parse_json(content, path)
    elif suffix in _YAML_SUFFIXES:
        parsed = _parse_yaml(content, path)
    else:
        parsed = _parse_lines(content)

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise LabelOverrideError(f"Label overrides in {path} must be a mapping")
    return {str(key): "" if value is None else str(value) for key, value in parsed.items()}


def _parse_json(content: str, path: Path) -> object:
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise LabelOverrideError(f"Invalid JSON in {path}: {exc}") from exc


def _parse_yaml(content: str, path: Path) -> object:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise LabelOverrideError(f"Invalid YAML in {path}: {exc}") from exc


def _parse_lines(content: str) -> dict[str, str]:
    entries: dict[str, str] = {}
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition(":")
        if not sep:
            continue
        entries[key.strip()] = value.strip()
    return entries
