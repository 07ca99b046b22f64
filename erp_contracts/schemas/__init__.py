"""Pydantic records for tracker rows and contract cases"""

from .cases import AuthConfig, CaseFile, ContractCase, GeneratedCaseFile
from .tracker import ActivityId, TrackerRow

__all__ = [
    "ActivityId", "TrackerRow",
    "AuthConfig", "CaseFile", "ContractCase", "GeneratedCaseFile",
]
