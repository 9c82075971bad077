from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from miniapp_schema.ir.errors import ValidationIssue


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue] = field(default_factory=list)
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, data: Dict[str, Any], warnings: Optional[List[ValidationIssue]] = None):
        return cls(is_valid=True, errors=[], warnings=list(warnings or []), data=data)

    @classmethod
    def failure(cls, errors: List[ValidationIssue], warnings: Optional[List[ValidationIssue]] = None):
        return cls(is_valid=False, errors=list(errors), warnings=list(warnings or []))

    @property
    def error(self) -> Optional[ValidationIssue]:
        return self.errors[0] if self.errors else None

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "data": self.data,
        }
