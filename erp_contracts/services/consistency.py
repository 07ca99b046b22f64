"""Tracker <-> OpenAPI activity ID consistency check"""

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List

import structlog

logger = structlog.get_logger()

CONSISTENT_MESSAGE = "✔ Tracker and OpenAPI activity IDs are consistent."
DRIFT_MESSAGE = "✖ Inconsistency detected"


@dataclass(frozen=True)
class ConsistencyReport:
    """Both directions of drift; a one-sided drift still fails"""
    missing_in_api: List[str] = field(default_factory=list)
    missing_in_tracker: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.missing_in_api and not self.missing_in_tracker

    @property
    def exit_code(self) -> int:
        return 0 if self.consistent else 1

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "missingInApi": list(self.missing_in_api),
            "missingInTracker": list(self.missing_in_tracker),
        }

    def render_lines(self) -> List[str]:
        if self.consistent:
            return [CONSISTENT_MESSAGE]
        return [
            DRIFT_MESSAGE,
            f"  Tracker IDs missing in OpenAPI: {self.missing_in_api}",
            f"  OpenAPI IDs missing in Tracker: {self.missing_in_tracker}",
        ]


def check(tracker_ids: AbstractSet[str], api_ids: AbstractSet[str]) -> ConsistencyReport:
    """Compare the two ID sets.

    Lists are sorted so the report does not depend on set iteration order.
    """
    tracker = set(tracker_ids)
    api = set(api_ids)
    report = ConsistencyReport(
        missing_in_api=sorted(tracker - api),
        missing_in_tracker=sorted(api - tracker),
    )
    logger.info(
        "consistency_checked",
        tracker_ids=len(tracker),
        api_ids=len(api),
        missing_in_api=len(report.missing_in_api),
        missing_in_tracker=len(report.missing_in_tracker),
    )
    return report
