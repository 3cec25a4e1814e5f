"""IO utilities for output files and diagnostics persistence."""

import json
from pathlib import Path
from typing import Any, Dict
import orjson


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, create if needed.

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def partial_path(path: str | Path) -> Path:
    """Sibling path used while a file is still being written."""
    path_obj = Path(path)
    return path_obj.with_name(path_obj.name + ".part")


def save_json(data: Dict[str, Any], file_path: str | Path, pretty: bool = True) -> None:
    """Save data as JSON file.

    Args:
        data: Data to save
        file_path: Output file path
        pretty: Whether to pretty-print (indent)
    """
    path_obj = Path(file_path)
    ensure_dir(path_obj.parent)

    if pretty:
        with open(path_obj, "w") as f:
            json.dump(data, f, indent=2, default=str)
    else:
        with open(path_obj, "wb") as f:
            f.write(orjson.dumps(data, option=orjson.OPT_SERIALIZE_NUMPY))


def load_json(file_path: str | Path) -> Dict[str, Any]:
    """Load JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Loaded data
    """
    with open(file_path, "rb") as f:
        return orjson.loads(f.read())
