"""Committed cases replayed in-process against the smoke API"""

from pathlib import Path

from erp_contracts.services.contract_runner import ContractRunner, load_case_file, summarize
from erp_contracts.services.schema_validators import build_validator_map
from erp_contracts.services.spec_loader import load_openapi_document

CASES_PATH = Path(__file__).parent / "cases.json"


def test_committed_cases_pass_against_smoke_app(smoke_client, sample_openapi_path):
    case_file = load_case_file(CASES_PATH)
    validators = build_validator_map(load_openapi_document(sample_openapi_path))
    runner = ContractRunner(
        "http://testserver/api/v1",
        validators,
        token="smoke-token",
        client=smoke_client,
    )
    outcomes = runner.run(case_file.cases)
    assert summarize(outcomes)["failed"] == 0, "\n".join(o.describe() for o in outcomes)
    assert any(case.validate_against_openapi for case in case_file.cases)


def test_unknown_route_fails_status_check(smoke_client):
    case_file = load_case_file(CASES_PATH)
    runner = ContractRunner("http://testserver/api/v1", {}, client=smoke_client)
    broken = case_file.cases[0].model_copy(update={"path": "/does-not-exist"})
    outcome = runner.execute(broken)
    assert not outcome.passed
    assert outcome.status_code == 404
