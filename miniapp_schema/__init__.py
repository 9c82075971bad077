# Mini-app metadata schema validation
# Validates untrusted mini-app documents and their contract-call actions against the ABI they carry

from miniapp_schema.config import DEFAULT_CONFIG, ValidatorConfig
from miniapp_schema.ir.errors import (
    DuplicateOption,
    EmptyOptionSet,
    EnvelopeError,
    FixedValueMissing,
    FunctionNotFound,
    GraphReferenceError,
    InvalidAddressError,
    InvalidChainError,
    InvalidPathFormat,
    MiniAppValidationError,
    MissingBaseUrl,
    MutabilityMismatch,
    ParameterCountMismatch,
    ParameterOrderMismatch,
    StructuralError,
    TypeIncompatibility,
    UnknownActionType,
    UnknownParameterType,
    UnreachableNodeError,
    ValidationIssue,
)
from miniapp_schema.ir.validation import ValidationResult
from miniapp_schema.validation.metadata_validator import (
    MetadataValidator,
    create_metadata,
    is_validated_metadata,
    validate,
)

__version__ = "0.4.0"

__all__ = [
    "DEFAULT_CONFIG",
    "ValidatorConfig",
    "ValidationIssue",
    "ValidationResult",
    "MetadataValidator",
    "create_metadata",
    "is_validated_metadata",
    "validate",
    "MiniAppValidationError",
    "EnvelopeError",
    "UnknownActionType",
    "StructuralError",
    "InvalidAddressError",
    "InvalidChainError",
    "FunctionNotFound",
    "UnknownParameterType",
    "ParameterCountMismatch",
    "ParameterOrderMismatch",
    "TypeIncompatibility",
    "FixedValueMissing",
    "MutabilityMismatch",
    "DuplicateOption",
    "EmptyOptionSet",
    "GraphReferenceError",
    "UnreachableNodeError",
    "MissingBaseUrl",
    "InvalidPathFormat",
]
