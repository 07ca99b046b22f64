"""
Draft contract cases from the OpenAPI document.

The output is a starting point for the hand-maintained ``cases.json``: every
case expects the permissive ``[200, 400]`` pair and has schema validation
switched off until someone reviews it.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from erp_contracts.schemas.cases import (
    DEFAULT_EXPECT,
    UNKNOWN_ACTIVITY_ID,
    ContractCase,
    GeneratedCaseFile,
)
from erp_contracts.services.spec_loader import iter_operations, operation_activity_id

logger = structlog.get_logger()


def case_for_operation(path: str, method: str, operation: Dict[str, Any]) -> ContractCase:
    verb = method.upper()
    summary = operation.get("summary")
    return ContractCase(
        activity_id=operation_activity_id(operation) or UNKNOWN_ACTIVITY_ID,
        name=summary if summary else f"{verb} {path}",
        method=verb,
        path=path,
        headers={},
        expect=list(DEFAULT_EXPECT),
        validate_against_openapi=False,
    )


def generate_cases(document: Dict[str, Any]) -> List[ContractCase]:
    """One case per (path, method), in document order"""
    return [case_for_operation(path, method, op) for path, method, op in iter_operations(document)]


def build_generated_document(
    cases: List[ContractCase],
    base_url: str,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    generated = GeneratedCaseFile(
        generated_at=generated_at or datetime.now(timezone.utc),
        base_url=base_url,
        cases=cases,
    )
    return generated.to_wire()


def write_generated_cases(document: Dict[str, Any], out_path: Path, base_url: str) -> List[ContractCase]:
    """Generate cases and write the draft file; returns the cases written"""
    cases = generate_cases(document)
    payload = build_generated_document(cases, base_url)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    unknown = sum(1 for case in cases if case.activity_id == UNKNOWN_ACTIVITY_ID)
    logger.info("cases_generated", path=str(out_path), cases=len(cases), unannotated=unknown)
    return cases
