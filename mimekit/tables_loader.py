"""
Static Table Loader
===================

Loads the charset alias table and the MIME type tables from YAML files. The
tables are read once and handed out as read-only mappings.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Union

import yaml

from mimekit.config import get_settings
from mimekit.logger import get_logger

logger = get_logger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
CHARSETS_FILE = "charsets.yaml"
MIMETYPES_FILE = "mimetypes.yaml"

TableEntry = Union[str, List[str]]

# Loaded tables, filled on first use and never mutated afterwards
_charset_aliases = None
_mime_tables = None


def _resolve_table_file(filename: str) -> Path:
    """
    Resolve a table path: a file inside MIMEKIT_TABLES_DIR wins, otherwise the
    copy shipped in mimekit/data is used.
    """
    configured = get_settings().TABLES_DIR.strip()
    if configured:
        override = Path(configured).expanduser() / filename
        if override.exists():
            return override
        logger.warning("Table override %s not found, using bundled %s", override, filename)
    return DATA_DIR / filename


def _read_yaml(filename: str) -> Dict[str, Any]:
    path = _resolve_table_file(filename)
    if not path.exists():
        raise FileNotFoundError(f"Table file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    return data


def _ensure_str_map(value: Any) -> Dict[str, str]:
    """Keep only string -> string pairs, keys lowercased."""
    if not isinstance(value, dict):
        return {}
    out: Dict[str, str] = {}
    for key, item in value.items():
        if isinstance(key, str) and isinstance(item, str) and item.strip():
            out[key.strip().lower()] = item.strip()
    return out


def _ensure_entry_map(value: Any) -> Dict[str, TableEntry]:
    """Keep string -> (string | non-empty list of strings) pairs, keys lowercased."""
    if not isinstance(value, dict):
        return {}
    out: Dict[str, TableEntry] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            continue
        if isinstance(item, str) and item.strip():
            out[key.strip().lower()] = item.strip()
        elif isinstance(item, list):
            entries = [str(v).strip() for v in item if str(v).strip()]
            if entries:
                out[key.strip().lower()] = entries
    return out


def get_charset_aliases() -> Mapping[str, str]:
    """
    Alias (lowercase) -> canonical charset label, e.g. ``win-1257`` -> ``WINDOWS-1257``.
    """
    global _charset_aliases
    if _charset_aliases is not None:
        return _charset_aliases

    aliases = _ensure_str_map(_read_yaml(CHARSETS_FILE).get("aliases"))
    logger.debug("Loaded %d charset aliases", len(aliases))
    _charset_aliases = MappingProxyType(aliases)
    return _charset_aliases


def get_mime_tables() -> Mapping[str, Mapping[str, TableEntry]]:
    """
    Both MIME lookup tables: ``types`` (mime type -> extension(s)) and
    ``extensions`` (extension -> mime type(s)).
    """
    global _mime_tables
    if _mime_tables is not None:
        return _mime_tables

    data = _read_yaml(MIMETYPES_FILE)
    types = _ensure_entry_map(data.get("types"))
    extensions = _ensure_entry_map(data.get("extensions"))
    logger.debug("Loaded %d mime types, %d extensions", len(types), len(extensions))
    _mime_tables = MappingProxyType(
        {
            "types": MappingProxyType(types),
            "extensions": MappingProxyType(extensions),
        }
    )
    return _mime_tables


def reset_tables() -> None:
    """Forget loaded tables; the next lookup reads the YAML files again."""
    global _charset_aliases, _mime_tables
    _charset_aliases = None
    _mime_tables = None
