"""
Loaders for the two external artifacts the tooling compares:

* the OpenAPI document (YAML) whose operations carry ``x-activity-id``
* the tracker workbook whose first sheet lists activities by ``Unique Code``
"""

import zipfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple

import pandas as pd
import structlog
import yaml
from pydantic import ValidationError

from erp_contracts.exceptions import (
    SpecFormatError,
    SpecNotFoundError,
    TrackerFormatError,
    TrackerNotFoundError,
)
from erp_contracts.schemas.tracker import UNIQUE_CODE_COLUMN, ActivityId, TrackerRow

logger = structlog.get_logger()

ACTIVITY_ID_KEY = "x-activity-id"
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def load_openapi_document(path: Path) -> Dict[str, Any]:
    """Parse the OpenAPI YAML into a plain dict tree"""
    path = Path(path)
    if not path.exists():
        raise SpecNotFoundError(path)

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise SpecFormatError(path, str(exc)) from exc

    if not isinstance(document, dict):
        raise SpecFormatError(path, "top level must be a mapping")

    paths = document.get("paths") or {}
    if not isinstance(paths, dict):
        raise SpecFormatError(path, "'paths' must be a mapping")

    logger.debug("openapi_loaded", path=str(path), path_count=len(paths))
    return document


def iter_operations(document: Dict[str, Any]) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    """Yield (path, method, operation) in document order.

    Path-item keys that are not HTTP verbs (``parameters``, ``summary``...)
    are skipped.
    """
    for path, item in (document.get("paths") or {}).items():
        if not isinstance(item, dict):
            continue
        for method, operation in item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            yield path, method, operation


def operation_activity_id(operation: Dict[str, Any]) -> Optional[ActivityId]:
    raw = operation.get(ACTIVITY_ID_KEY)
    if raw is None:
        return None
    value = str(raw).strip()
    return ActivityId(value) if value else None


def collect_activity_ids(document: Dict[str, Any]) -> Set[ActivityId]:
    """All ``x-activity-id`` annotations in the document"""
    ids: Set[ActivityId] = set()
    for _, _, operation in iter_operations(document):
        activity_id = operation_activity_id(operation)
        if activity_id:
            ids.add(activity_id)
    return ids


def resolve_tracker_path(primary: Path, fallback: Path) -> Path:
    """Return the extended tracker if present, else the plain one.

    Neither existing is a configuration error: treating it as an empty
    tracker would report every OpenAPI ID as drift.
    """
    for candidate in (Path(primary), Path(fallback)):
        if candidate.exists():
            return candidate
    raise TrackerNotFoundError(Path(primary).parent, (Path(primary), Path(fallback)))


def load_tracker_rows(path: Path) -> List[TrackerRow]:
    """Read the first sheet of the tracker workbook into validated rows"""
    path = Path(path)
    try:
        df = pd.read_excel(path, sheet_name=0, dtype=str, engine="openpyxl")
    except FileNotFoundError as exc:
        raise TrackerNotFoundError(path.parent, (path,)) from exc
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise TrackerFormatError(path, f"unreadable workbook: {exc}") from exc

    df = df.dropna(how="all")
    df.columns = [str(col).strip() for col in df.columns]
    if UNIQUE_CODE_COLUMN not in df.columns:
        raise TrackerFormatError(path, f"missing '{UNIQUE_CODE_COLUMN}' column")

    rows: List[TrackerRow] = []
    for position, record in enumerate(df.to_dict(orient="records")):
        cleaned = {key: (None if pd.isna(value) else value) for key, value in record.items()}
        try:
            rows.append(TrackerRow.model_validate(cleaned))
        except ValidationError as exc:
            # +2: header row plus 1-based numbering
            raise TrackerFormatError(
                path, exc.errors()[0]["msg"], row=int(df.index[position]) + 2
            ) from exc

    logger.info("tracker_loaded", path=str(path), rows=len(rows))
    return rows


def tracker_activity_ids(rows: Sequence[TrackerRow]) -> Set[ActivityId]:
    return {row.activity_id for row in rows}
