"""
Contract test replay.

Each case goes pending -> executed -> passed/failed. Transport errors and
timeouts fail the case with the error text; they never skip it and never
stop the remaining cases.
"""

import json
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import httpx
import structlog
from pydantic import ValidationError

from erp_contracts.exceptions import CaseFileError
from erp_contracts.schemas.cases import CaseFile, ContractCase
from erp_contracts.services.schema_validators import SchemaLookup, lookup_validator

logger = structlog.get_logger()

TOKEN_PLACEHOLDER = "${TOKEN}"
TOKEN_ENV_VAR = "CONTRACT_TOKEN"

# Transport failures plus errors raised while building the request
# (non-ASCII header values, bad URLs, unserializable bodies)
REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError)

# Monotonic clock for request durations
_clock = time.perf_counter


class CaseState(Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class CaseOutcome:
    """Result of replaying one case"""
    case: ContractCase
    state: CaseState = CaseState.PENDING
    status_code: Optional[int] = None
    failures: List[str] = field(default_factory=list)
    schema_errors: List[str] = field(default_factory=list)
    error: Optional[str] = None
    duration_ms: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.state is CaseState.PASSED

    def describe(self) -> str:
        lines = [f"{self.case.display_name}: {self.state.value}"]
        lines.extend(f"  - {failure}" for failure in self.failures)
        lines.extend(f"    schema: {err}" for err in self.schema_errors)
        return "\n".join(lines)


def resolve_token(env_token: Optional[str], file_token: Optional[str]) -> str:
    """Environment override, then the case-file default, then empty"""
    return env_token or file_token or ""


def substitute_token(headers: Mapping[str, str], token: str) -> Dict[str, str]:
    """Replace the ``${TOKEN}`` placeholder in header values"""
    return {
        name: value.replace(TOKEN_PLACEHOLDER, token) if TOKEN_PLACEHOLDER in value else value
        for name, value in headers.items()
    }


def load_case_file(path: Path) -> CaseFile:
    """Read and validate a hand-maintained case file"""
    path = Path(path)
    if not path.exists():
        raise CaseFileError(path, "case file not found")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CaseFileError(path, f"invalid JSON: {exc}") from exc
    return parse_case_file(raw, path)


def parse_case_file(raw: object, path: Optional[Path] = None) -> CaseFile:
    try:
        return CaseFile.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise CaseFileError(path, f"{location}: {first['msg']}") from exc


class ContractRunner:
    """Replays contract cases against a running API.

    ``validators`` must be fully built before the first case runs; the runner
    only reads from it.
    """

    def __init__(
        self,
        base_url: str,
        validators: Mapping[str, SchemaLookup],
        token: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url
        self.validators = validators
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_case_file(
        cls,
        case_file: CaseFile,
        validators: Mapping[str, SchemaLookup],
        timeout: float = 30.0,
        env_token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> "ContractRunner":
        if env_token is None:
            env_token = os.environ.get(TOKEN_ENV_VAR)
        return cls(
            base_url=case_file.base_url,
            validators=validators,
            token=resolve_token(env_token, case_file.bearer),
            timeout=timeout,
            client=client,
        )

    def __enter__(self) -> "ContractRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def build_url(self, case: ContractCase) -> str:
        return self.base_url + case.path

    def build_request_kwargs(self, case: ContractCase) -> Dict[str, object]:
        kwargs: Dict[str, object] = {"headers": substitute_token(case.headers, self.token)}
        if case.has_body:
            kwargs["json"] = case.body
        return kwargs

    def execute(self, case: ContractCase) -> CaseOutcome:
        outcome = CaseOutcome(case=case)
        url = self.build_url(case)
        start = _clock()

        try:
            response = self.client.request(case.method, url, **self.build_request_kwargs(case))
        except REQUEST_ERRORS as exc:
            outcome.state = CaseState.FAILED
            outcome.error = f"{type(exc).__name__}: {exc}"
            outcome.failures.append(f"request to {url} failed: {outcome.error}")
            logger.error("case_request_failed", case=case.display_name, url=url, error=outcome.error)
            return outcome
        finally:
            outcome.duration_ms = int((_clock() - start) * 1000)

        outcome.state = CaseState.EXECUTED
        outcome.status_code = response.status_code

        if response.status_code not in case.expect:
            outcome.failures.append(
                f"expected status in {case.expect}, got {response.status_code}"
            )

        if case.validate_against_openapi and self._is_json(response):
            self._validate_body(case, response, outcome)

        outcome.state = CaseState.FAILED if outcome.failures else CaseState.PASSED
        logger.info(
            "case_executed",
            case=case.display_name,
            status_code=outcome.status_code,
            state=outcome.state.value,
            duration_ms=outcome.duration_ms,
        )
        return outcome

    def run(self, cases: Iterable[ContractCase]) -> List[CaseOutcome]:
        """Replay cases one after another"""
        return [self.execute(case) for case in cases]

    @staticmethod
    def _is_json(response: httpx.Response) -> bool:
        media_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        return "json" in media_type

    def _validate_body(self, case: ContractCase, response: httpx.Response, outcome: CaseOutcome) -> None:
        lookup = lookup_validator(self.validators, case.schema_key)
        if not lookup.available:
            logger.debug("schema_validation_skipped", key=lookup.key, reason=lookup.reason)
            return

        try:
            body = response.json()
        except ValueError as exc:
            outcome.failures.append(f"response body is not valid JSON: {exc}")
            return

        errors = lookup.errors_for(body)
        if errors:
            logger.error("schema_errors", key=lookup.key, errors=errors)
            outcome.schema_errors.extend(errors)
            outcome.failures.append(f"response body does not match {lookup.key} schema")


def summarize(outcomes: Iterable[CaseOutcome]) -> Dict[str, int]:
    outcomes = list(outcomes)
    passed = sum(1 for outcome in outcomes if outcome.passed)
    return {"total": len(outcomes), "passed": passed, "failed": len(outcomes) - passed}
