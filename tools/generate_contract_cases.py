#!/usr/bin/env python3
"""
Generate a skeleton contract case list from the OpenAPI document so teams can
fill in tokens and path parameters incrementally.

Usage:
    python tools/generate_contract_cases.py
    python tools/generate_contract_cases.py --out /tmp/cases.generated.json
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from erp_contracts.config import settings
from erp_contracts.exceptions import ConfigurationError
from erp_contracts.services.case_generator import write_generated_cases
from erp_contracts.services.spec_loader import load_openapi_document


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Draft contract cases from OpenAPI")
    parser.add_argument("--spec", type=Path, default=Path(settings.openapi_spec_path))
    parser.add_argument("--out", type=Path, default=Path(settings.generated_cases_path))
    parser.add_argument("--base-url", default=settings.default_base_url)
    args = parser.parse_args(argv)

    try:
        document = load_openapi_document(args.spec)
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return exc.exit_code

    write_generated_cases(document, args.out, args.base_url)
    print(f"Generated: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
