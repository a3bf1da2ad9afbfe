"""
JSON persistence for assembled results.

One document per category (``currencies.json``, ``gold.json``,
``crypto.json``). Files are written whole: the document goes to a
temporary file in the same directory, which then replaces the target.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from .core.models import Category, FetchResult

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def result_path(category: Category, data_dir: PathLike) -> Path:
    return Path(data_dir) / category.filename


def save_result(result: FetchResult, data_dir: PathLike) -> Path:
    """
    Write a FetchResult to ``<data_dir>/<category>.json``.

    Args:
        result: Assembled result
        data_dir: Output directory (created if missing)

    Returns:
        Path of the written file
    """
    filepath = result_path(result.category, data_dir)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.",
        suffix=".tmp",
        dir=filepath.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, filepath)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(
        "saved_json",
        path=str(filepath),
        category=result.category.value,
        records=len(result.records),
    )
    return filepath


def load_result(path: PathLike, category: Category) -> Optional[FetchResult]:
    """
    Read a persisted FetchResult.

    Missing, empty, or malformed files yield None, the same way a
    consumer falls back to "no data available".

    Args:
        path: File to read
        category: Category the file should hold

    Returns:
        FetchResult or None
    """
    path = Path(path)
    if not path.is_file():
        return None

    try:
        content = path.read_text(encoding="utf-8")
        if not content.strip():
            return None
        return FetchResult.from_dict(category, json.loads(content))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning("unreadable_result", path=str(path), error=str(e))
        return None
