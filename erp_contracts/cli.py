"""Command-line interface for the ERP contract tooling"""

import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from erp_contracts.config import settings
from erp_contracts.exceptions import ConfigurationError
from erp_contracts.logging_config import configure_logging
from erp_contracts.services.case_generator import write_generated_cases
from erp_contracts.services.consistency import check
from erp_contracts.services.contract_runner import ContractRunner, load_case_file, summarize
from erp_contracts.services.schema_validators import build_validator_map
from erp_contracts.services.spec_loader import (
    collect_activity_ids,
    load_openapi_document,
    load_tracker_rows,
    resolve_tracker_path,
    tracker_activity_ids,
)
from erp_contracts.services.system_validator import validate_system

logger = structlog.get_logger()


def _fail_configuration(exc: ConfigurationError) -> None:
    click.echo(str(exc), err=True)
    sys.exit(exc.exit_code)


@click.group()
@click.option('--log-level', default=None, help='Override LOG_LEVEL')
def cli(log_level: Optional[str]):
    """School ERP contract tooling"""
    configure_logging(log_level or settings.log_level, settings.log_format)


@cli.command('verify-tracker')
@click.option('--spec', 'spec_path', type=click.Path(path_type=Path), default=None, help='OpenAPI YAML')
@click.option('--tracker', 'tracker_path', type=click.Path(path_type=Path), default=None,
              help='Tracker workbook (skips the extended/plain lookup)')
def verify_tracker(spec_path: Optional[Path], tracker_path: Optional[Path]):
    """Fail if tracker and OpenAPI activity IDs disagree"""
    try:
        document = load_openapi_document(spec_path or Path(settings.openapi_spec_path))
        if tracker_path is None:
            tracker_path = resolve_tracker_path(*settings.tracker_candidates())
        rows = load_tracker_rows(tracker_path)
    except ConfigurationError as exc:
        _fail_configuration(exc)

    report = check(tracker_activity_ids(rows), collect_activity_ids(document))
    for line in report.render_lines():
        click.echo(line, err=not report.consistent)
    sys.exit(report.exit_code)


@cli.command('generate-cases')
@click.option('--spec', 'spec_path', type=click.Path(path_type=Path), default=None, help='OpenAPI YAML')
@click.option('--out', 'out_path', type=click.Path(path_type=Path), default=None, help='Output JSON')
@click.option('--base-url', default=None, help='Base URL written into the draft')
def generate_cases(spec_path: Optional[Path], out_path: Optional[Path], base_url: Optional[str]):
    """Write a draft case file with one case per OpenAPI operation"""
    try:
        document = load_openapi_document(spec_path or Path(settings.openapi_spec_path))
    except ConfigurationError as exc:
        _fail_configuration(exc)

    out_path = out_path or Path(settings.generated_cases_path)
    cases = write_generated_cases(document, out_path, base_url or settings.default_base_url)
    click.echo(f"Generated: {out_path} ({len(cases)} cases)")


@cli.command('run-contracts')
@click.option('--cases', 'cases_path', type=click.Path(path_type=Path), default=None, help='Case file')
@click.option('--spec', 'spec_path', type=click.Path(path_type=Path), default=None, help='OpenAPI YAML')
@click.option('--base-url', default=None, help='Override the case file baseUrl')
@click.option('--timeout', type=float, default=None, help='Per-request timeout in seconds')
def run_contracts(cases_path: Optional[Path], spec_path: Optional[Path],
                  base_url: Optional[str], timeout: Optional[float]):
    """Replay contract cases against a running API"""
    try:
        case_file = load_case_file(cases_path or Path(settings.cases_path))
        document = load_openapi_document(spec_path or Path(settings.openapi_spec_path))
    except ConfigurationError as exc:
        _fail_configuration(exc)

    if base_url:
        case_file = case_file.model_copy(update={"base_url": base_url})

    validators = build_validator_map(document)
    runner = ContractRunner.from_case_file(
        case_file,
        validators,
        timeout=timeout or settings.request_timeout_seconds,
        env_token=settings.contract_token,
    )
    with runner:
        outcomes = []
        for case in case_file.cases:
            outcome = runner.execute(case)
            outcomes.append(outcome)
            mark = "✅" if outcome.passed else "❌"
            click.echo(f"{mark} {outcome.describe()}")

    totals = summarize(outcomes)
    click.echo(f"\n{totals['passed']}/{totals['total']} cases passed")
    sys.exit(1 if totals["failed"] else 0)


@cli.command('validate-system')
@click.option('--root', type=click.Path(path_type=Path, file_okay=False), default=None,
              help='ERP repository root')
def validate_system_cmd(root: Optional[Path]):
    """Check ERP modules, core files and compiled output"""
    report = validate_system(root or Path(settings.erp_root))

    for label, result in (("Core Files", report.core), ("Compiled Output", report.compiled)):
        mark = "✅" if result.passed else "❌"
        click.echo(f"{mark} {label}")
        for issue in result.issues:
            click.echo(f"   - {issue}")

    click.echo()
    for module in report.modules:
        mark = "✅" if module.passed else "❌"
        click.echo(f"{mark} {module.name} Module")
        for issue in module.issues:
            click.echo(f"   - {issue}")

    click.echo(f"\n📊 Total Modules: {len(report.modules)}")
    click.echo(f"✅ Passed Modules: {report.passed_modules}")
    click.echo(f"❌ Failed Modules: {len(report.modules) - report.passed_modules}")
    click.echo(f"🎯 Total Activities: {report.total_activities}")
    click.echo(f"\n🚀 Overall System Status: {'✅ READY' if report.ready else '❌ NEEDS WORK'}")
    sys.exit(report.exit_code)


@cli.command('smoke-server')
@click.option('--host', default='127.0.0.1')
@click.option('--port', type=int, default=3001)
def smoke_server(host: str, port: int):
    """Serve the minimal health/test API"""
    import uvicorn

    click.echo(f"Smoke server on http://{host}:{port}/api/v1")
    uvicorn.run("erp_contracts.smoke_app:app", host=host, port=port, log_level="info")


if __name__ == '__main__':
    cli()
