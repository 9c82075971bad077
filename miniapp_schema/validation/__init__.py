"""
Validation module for mini-app metadata, actions, parameters and flows.
"""

from miniapp_schema.validation.blockchain_action_validator import (
    BlockchainActionValidator,
    apply_param_labels,
    is_blockchain_action,
    is_blockchain_action_metadata,
    validate_blockchain_action,
)
from miniapp_schema.validation.chain_validator import is_valid_chain, validate_chain_context
from miniapp_schema.validation.context import ValidationContext
from miniapp_schema.validation.dynamic_action_validator import (
    DynamicActionValidator,
    is_dynamic_action,
    resolve_action_path,
    validate_dynamic_action,
)
from miniapp_schema.validation.flow_validator import FlowValidator, is_action_flow, validate_flow
from miniapp_schema.validation.http_action_validator import (
    HttpActionValidator,
    is_http_action,
    validate_http_action,
)
from miniapp_schema.validation.metadata_validator import (
    MetadataValidator,
    create_metadata,
    is_validated_metadata,
    validate,
)
from miniapp_schema.validation.parameter_validator import ParameterValidator, validate_parameter
from miniapp_schema.validation.transfer_action_validator import (
    TransferActionValidator,
    is_transfer_action,
    validate_transfer_action,
)
from miniapp_schema.validation.type_compat import (
    infer_ui_type_from_abi_type,
    is_ui_type_compatible,
    is_value_compatible,
)

__all__ = [
    "BlockchainActionValidator",
    "DynamicActionValidator",
    "FlowValidator",
    "HttpActionValidator",
    "MetadataValidator",
    "ParameterValidator",
    "TransferActionValidator",
    "ValidationContext",
    "apply_param_labels",
    "create_metadata",
    "infer_ui_type_from_abi_type",
    "is_action_flow",
    "is_blockchain_action",
    "is_blockchain_action_metadata",
    "is_dynamic_action",
    "is_http_action",
    "is_transfer_action",
    "is_ui_type_compatible",
    "is_valid_chain",
    "is_validated_metadata",
    "is_value_compatible",
    "resolve_action_path",
    "validate",
    "validate_blockchain_action",
    "validate_chain_context",
    "validate_dynamic_action",
    "validate_flow",
    "validate_http_action",
    "validate_parameter",
    "validate_transfer_action",
]
