"""Error taxonomy for the contract tooling.

Configuration errors are fatal and map to exit code 2. Drift is reported,
not raised, and replay failures are recorded on each case outcome.
"""

from pathlib import Path
from typing import Optional

CONFIG_ERROR_EXIT_CODE = 2


class ContractToolingError(Exception):
    """Base class for all tooling errors"""


class ConfigurationError(ContractToolingError):
    """An input file is missing or malformed"""

    exit_code = CONFIG_ERROR_EXIT_CODE


class SpecNotFoundError(ConfigurationError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"OpenAPI document not found: {path}")


class SpecFormatError(ConfigurationError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"OpenAPI document {path} could not be parsed: {reason}")


class TrackerNotFoundError(ConfigurationError):
    def __init__(self, directory: Path, candidates: tuple = ()):
        self.directory = directory
        self.candidates = candidates
        super().__init__(f"Tracker file not found in {directory}")


class TrackerFormatError(ConfigurationError):
    def __init__(self, path: Path, message: str, row: Optional[int] = None):
        self.path = path
        self.row = row
        location = f" (row {row})" if row is not None else ""
        super().__init__(f"Tracker {path}{location}: {message}")


class CaseFileError(ConfigurationError):
    def __init__(self, path: Optional[Path], message: str):
        self.path = path
        prefix = f"{path}: " if path else ""
        super().__init__(f"{prefix}{message}")


class SchemaCompileError(ContractToolingError):
    """A response schema cannot be turned into a validator"""
