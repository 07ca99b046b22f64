"""Tracker spreadsheet records"""

from typing import Any, Dict, NewType

from pydantic import BaseModel, ConfigDict, Field, field_validator

ActivityId = NewType("ActivityId", str)

UNIQUE_CODE_COLUMN = "Unique Code"


class TrackerRow(BaseModel):
    """One activity row of the tracker; extra columns are kept as-is"""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    unique_code: str = Field(..., alias=UNIQUE_CODE_COLUMN, description="Activity identifier")

    @field_validator("unique_code", mode="before")
    @classmethod
    def _strip_code(cls, value: Any) -> str:
        if value is None:
            raise ValueError(f"'{UNIQUE_CODE_COLUMN}' is empty")
        code = str(value).strip()
        if not code:
            raise ValueError(f"'{UNIQUE_CODE_COLUMN}' is empty")
        return code

    @property
    def activity_id(self) -> ActivityId:
        return ActivityId(self.unique_code)

    @property
    def extra_columns(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})
