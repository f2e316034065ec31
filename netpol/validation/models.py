"""
Validation result models.

Issues are advisory data: the validator returns them and never raises.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Issue severity levels."""
    ERROR = "error"
    WARNING = "warning"


class Issue(BaseModel):
    """Single validation finding routed to an element and field."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str = Field(description="Human-readable description")
    element_id: Optional[str] = Field(default=None, alias="elementId", description="Node or edge ID")
    field_key: Optional[str] = Field(default=None, alias="fieldKey", description="Offending field")
    severity: Severity = Field(default=Severity.ERROR, description="error blocks generation, warning does not")

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def describe(self) -> str:
        details = f"element: {self.element_id or 'N/A'}"
        if self.field_key:
            details += f", field: {self.field_key}"
        return f"{self.message} ({details})"


class ValidationReport(BaseModel):
    """Issues of one validation run plus summary helpers."""
    issues: List[Issue] = Field(default_factory=list, description="Issues in validation order")
    strict: bool = Field(default=False, description="Warnings also fail the report")

    @property
    def errors(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity == Severity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def ok(self) -> bool:
        if self.strict:
            return not self.issues
        return self.error_count == 0

    def for_element(self, element_id: str) -> List[Issue]:
        return [issue for issue in self.issues if issue.element_id == element_id]

    def get_summary(self) -> str:
        status = "valid" if self.ok else "invalid"
        return f"Graph is {status}: {self.error_count} error(s), {self.warning_count} warning(s)"
