"""
ERP source-tree validation.

Checks that each ERP module has its directory and source files, that each
module's activity IDs are referenced from its controllers, and that core
files and compiled output exist.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

import structlog

logger = structlog.get_logger()

MODULE_FILES = ("controllers.ts", "services.ts", "repos.ts", "dtos.ts", "index.ts")
CONTROLLERS_FILE = "controllers.ts"
MIN_FILE_CHARS = 100

CORE_FILES = (
    "src/app.ts",
    "src/server.ts",
    "src/lib/database.ts",
    "src/lib/rbac.ts",
    "src/lib/audit.ts",
    "package.json",
    "tsconfig.json",
)
COMPILED_FILES = ("app.js", "server.js")


@dataclass(frozen=True)
class ModuleExpectation:
    name: str
    activities: Tuple[str, ...]
    files: Tuple[str, ...] = MODULE_FILES

    @property
    def directory_name(self) -> str:
        return self.name.lower()


def _activities(prefix: str, phase: int, count: int) -> Tuple[str, ...]:
    return tuple(f"{prefix}-{phase:02d}-{n:03d}" for n in range(1, count + 1))


EXPECTED_MODULES: Tuple[ModuleExpectation, ...] = (
    ModuleExpectation("DATA", _activities("DATA", 0, 1)),
    ModuleExpectation("SETUP", _activities("SETUP", 1, 4)),
    ModuleExpectation("AUTH", _activities("AUTH", 2, 2)),
    ModuleExpectation("USER", _activities("USER", 3, 6)),
    ModuleExpectation("STUD", _activities("STUD", 4, 8)),
    ModuleExpectation("FEES", _activities("FEES", 5, 10)),
    ModuleExpectation("ATTD", _activities("ATTD", 6, 4)),
    ModuleExpectation("REPT", _activities("REPT", 7, 6)),
    ModuleExpectation("DASH", _activities("DASH", 8, 3)),
    ModuleExpectation("COMM", _activities("COMM", 9, 3)),
)


@dataclass
class CheckResult:
    """PASS/FAIL plus issues; warnings never flip the status"""
    name: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def status(self) -> str:
        return "PASS" if self.passed else "FAIL"

    @property
    def issues(self) -> List[str]:
        return self.errors + self.warnings


@dataclass
class SystemReport:
    core: CheckResult
    compiled: CheckResult
    modules: List[CheckResult]
    total_activities: int

    @property
    def passed_modules(self) -> int:
        return sum(1 for module in self.modules if module.passed)

    @property
    def ready(self) -> bool:
        return self.core.passed and self.compiled.passed and self.passed_modules == len(self.modules)

    @property
    def exit_code(self) -> int:
        return 0 if self.ready else 1


def validate_module(root: Path, expectation: ModuleExpectation) -> CheckResult:
    result = CheckResult(name=expectation.name)
    module_dir = Path(root) / "src" / "modules" / expectation.directory_name

    if not module_dir.is_dir():
        result.errors.append(f"Module directory does not exist: {module_dir}")
        return result

    for filename in expectation.files:
        file_path = module_dir / filename
        if not file_path.exists():
            result.errors.append(f"Missing file: {filename}")
            continue
        if len(file_path.read_text(encoding="utf-8").strip()) < MIN_FILE_CHARS:
            result.warnings.append(f"File {filename} appears to be empty or minimal")

    controllers = module_dir / CONTROLLERS_FILE
    if controllers.exists():
        content = controllers.read_text(encoding="utf-8")
        for activity in expectation.activities:
            if activity not in content:
                result.warnings.append(f"Activity {activity} not found in controllers")

    return result


def validate_core_files(root: Path, core_files: Sequence[str] = CORE_FILES) -> CheckResult:
    result = CheckResult(name="core")
    for relative in core_files:
        if not (Path(root) / relative).exists():
            result.errors.append(f"Missing core file: {relative}")
    return result


def validate_compiled_output(root: Path, compiled_files: Sequence[str] = COMPILED_FILES) -> CheckResult:
    result = CheckResult(name="compiled")
    dist = Path(root) / "dist"
    if not dist.is_dir():
        result.errors.append("Compiled output directory (dist/) does not exist")
        return result
    for filename in compiled_files:
        if not (dist / filename).exists():
            result.errors.append(f"Compiled {filename} not found")
    return result


def validate_system(
    root: Path,
    modules: Sequence[ModuleExpectation] = EXPECTED_MODULES,
) -> SystemReport:
    report = SystemReport(
        core=validate_core_files(root),
        compiled=validate_compiled_output(root),
        modules=[validate_module(root, expectation) for expectation in modules],
        total_activities=sum(len(expectation.activities) for expectation in modules),
    )
    logger.info(
        "system_validated",
        root=str(root),
        ready=report.ready,
        passed_modules=report.passed_modules,
        modules=len(report.modules),
    )
    return report
