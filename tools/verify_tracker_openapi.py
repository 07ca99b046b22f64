#!/usr/bin/env python3
"""
Verify tracker <-> OpenAPI consistency (CI gate).

Exit codes:
    0  every tracker activity has an x-activity-id operation and vice versa
    1  drift in either direction (both lists are printed)
    2  tracker workbook or OpenAPI document missing

Usage:
    python tools/verify_tracker_openapi.py
    python tools/verify_tracker_openapi.py --spec api/openapi.yaml --tracker-dir docs/tracker
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from erp_contracts.config import settings
from erp_contracts.exceptions import ConfigurationError
from erp_contracts.services.consistency import check
from erp_contracts.services.spec_loader import (
    collect_activity_ids,
    load_openapi_document,
    load_tracker_rows,
    resolve_tracker_path,
    tracker_activity_ids,
)


def run(spec_path: Path, tracker_dir: Path) -> int:
    try:
        document = load_openapi_document(spec_path)
        tracker_path = resolve_tracker_path(
            tracker_dir / settings.tracker_primary_name,
            tracker_dir / settings.tracker_fallback_name,
        )
        rows = load_tracker_rows(tracker_path)
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return exc.exit_code

    report = check(tracker_activity_ids(rows), collect_activity_ids(document))
    stream = sys.stdout if report.consistent else sys.stderr
    for line in report.render_lines():
        print(line, file=stream)
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--spec", type=Path, default=Path(settings.openapi_spec_path))
    parser.add_argument("--tracker-dir", type=Path, default=Path(settings.tracker_dir))
    args = parser.parse_args(argv)
    return run(args.spec, args.tracker_dir)


if __name__ == "__main__":
    sys.exit(main())
