"""Validation result models."""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one set of transaction inputs."""

    is_valid: bool = Field(
        ...,
        description="True when no error-level issues were found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
    )

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
