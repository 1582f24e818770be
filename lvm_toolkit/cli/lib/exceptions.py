"""Custom exceptions for LVM Toolkit."""

from dataclasses import asdict, dataclass
from typing import List


@dataclass(frozen=True)
class Violation:
    """A single field-level validation failure.

    Attributes:
        field: Caller-facing field name (e.g. "lvType"); empty for
            constraints that span several fields
        kind: "missing", "type", "enum", "value" or "unexpected"
        message: Human-readable reason
    """

    field: str
    kind: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


class LvmToolkitError(Exception):
    """Base exception for LVM Toolkit errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ArgumentValidationError(LvmToolkitError):
    """Tool arguments failed schema validation."""

    def __init__(self, violations: List[Violation]):
        self.violations = violations
        fields = ", ".join(v.field or "<arguments>" for v in violations)
        super().__init__(f"Invalid arguments: {fields}")


class UnknownToolError(LvmToolkitError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")
