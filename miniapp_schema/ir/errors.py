from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass
class ValidationIssue:
    level: str          # "error" | "warning"
    code: str
    message: str
    path: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "path": self.path,
        }


def join_path(prefix: Optional[str], suffix: Optional[str]) -> Optional[str]:
    if not prefix:
        return suffix
    if not suffix:
        return prefix
    if suffix.startswith("["):
        return f"{prefix}{suffix}"
    return f"{prefix}.{suffix}"


class MiniAppValidationError(ValueError):
    """Base class for every failure raised by the validation pipeline."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {self.path})"
        return self.message

    def _clone(self, message: str, path: Optional[str]) -> "MiniAppValidationError":
        return type(self)(message, path=path)

    def with_context(
        self, path: Optional[str] = None, prefix: Optional[str] = None
    ) -> "MiniAppValidationError":
        """Same error class, with a parent path and message prefix added."""
        message = f"{prefix}: {self.message}" if prefix else self.message
        return self._clone(message, join_path(path, self.path))

    def to_issue(self) -> ValidationIssue:
        return ValidationIssue(
            level="error",
            code=self.code,
            message=self.message,
            path=self.path,
        )


class EnvelopeError(MiniAppValidationError):
    code = "ENVELOPE_ERROR"


class UnknownActionType(MiniAppValidationError):
    code = "UNKNOWN_ACTION_TYPE"


class StructuralError(MiniAppValidationError):
    code = "STRUCTURAL_ERROR"


class InvalidAddressError(StructuralError):
    code = "INVALID_ADDRESS"


class InvalidChainError(StructuralError):
    code = "INVALID_CHAIN"


class FunctionNotFound(StructuralError):
    code = "FUNCTION_NOT_FOUND"


class UnknownParameterType(StructuralError):
    code = "UNKNOWN_PARAMETER_TYPE"


class ParameterCountMismatch(MiniAppValidationError):
    code = "PARAMETER_COUNT_MISMATCH"


class ParameterOrderMismatch(MiniAppValidationError):
    code = "PARAMETER_ORDER_MISMATCH"


class TypeIncompatibility(MiniAppValidationError):
    code = "TYPE_INCOMPATIBILITY"


class FixedValueMissing(MiniAppValidationError):
    code = "FIXED_VALUE_MISSING"


class MutabilityMismatch(MiniAppValidationError):
    code = "MUTABILITY_MISMATCH"


class DuplicateOption(MiniAppValidationError):
    code = "DUPLICATE_OPTION"


class EmptyOptionSet(MiniAppValidationError):
    code = "EMPTY_OPTION_SET"


class GraphReferenceError(MiniAppValidationError):
    code = "GRAPH_REFERENCE_ERROR"


class UnreachableNodeError(MiniAppValidationError):
    code = "UNREACHABLE_NODE"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        node_ids: Iterable[str] = (),
    ):
        super().__init__(message, path=path)
        self.node_ids: List[str] = list(node_ids)

    def _clone(self, message: str, path: Optional[str]) -> "UnreachableNodeError":
        return UnreachableNodeError(message, path=path, node_ids=self.node_ids)


class MissingBaseUrl(MiniAppValidationError):
    code = "MISSING_BASE_URL"


class InvalidPathFormat(MiniAppValidationError):
    code = "INVALID_PATH_FORMAT"
