"""Contract test case records.

Wire names are camelCase (``activityId``, ``validateAgainstOpenAPI``) so that
case files stay interchangeable with the hand-maintained ``cases.json``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_ACTIVITY_ID = "UNKNOWN"
DEFAULT_EXPECT = (200, 400)
GENERATED_COMMENT = "Auto-generated from OpenAPI. Copy entries into cases.json and edit as needed."


class ContractCase(BaseModel):
    """One replayable request plus its expected outcome"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    activity_id: str = Field(..., alias="activityId", min_length=1)
    name: str = Field(..., description="Human readable case name")
    method: str = Field(..., min_length=1, description="HTTP verb, upper-cased on load")
    path: str = Field(..., description="Path appended to the base URL verbatim")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Any] = Field(default=None, description="JSON body, sent only when present")
    expect: List[int] = Field(..., min_length=1, description="Accepted status codes")
    validate_against_openapi: bool = Field(default=False, alias="validateAgainstOpenAPI")

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def has_body(self) -> bool:
        return self.body is not None

    @property
    def schema_key(self) -> str:
        """Key into the compiled validator map"""
        return f"{self.method} {self.path}"

    @property
    def display_name(self) -> str:
        return f"{self.activity_id} - {self.method} {self.path} - {self.name}"

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AuthConfig(BaseModel):
    bearer: str = ""


class CaseFile(BaseModel):
    """Hand-maintained case file consumed by the runner"""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(..., alias="baseUrl", min_length=1)
    auth: Optional[AuthConfig] = None
    cases: List[ContractCase] = Field(default_factory=list)

    @property
    def bearer(self) -> str:
        return self.auth.bearer if self.auth else ""


class GeneratedCaseFile(BaseModel):
    """Draft case file written by the generator"""

    model_config = ConfigDict(populate_by_name=True)

    comment: str = Field(default=GENERATED_COMMENT, alias="_comment")
    generated_at: datetime = Field(..., alias="generatedAt")
    base_url: str = Field(..., alias="baseUrl")
    cases: List[ContractCase] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "_comment": self.comment,
            "generatedAt": self.generated_at.isoformat().replace("+00:00", "Z"),
            "baseUrl": self.base_url,
            "cases": [case.to_wire() for case in self.cases],
        }
