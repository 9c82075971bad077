"""
Blockchain Action Validator - validates contract-call actions against the ABI
they carry and resolves the called function's mutability class.

Validation runs in fixed stages, stopping at the first failure:
    structure -> parameters (positional ABI binding) -> mutability/amount
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from miniapp_schema.ir.abi import AbiItem, find_function, has_input_named, parse_abi
from miniapp_schema.ir.errors import (
    FixedValueMissing,
    FunctionNotFound,
    InvalidAddressError,
    MutabilityMismatch,
    ParameterCountMismatch,
    ParameterOrderMismatch,
    StructuralError,
    TypeIncompatibility,
    join_path,
)
from miniapp_schema.utils.addresses import is_address
from miniapp_schema.validation.chain_validator import validate_chain_context
from miniapp_schema.validation.context import ValidationContext, ensure_context
from miniapp_schema.validation.parameter_validator import (
    SELECTION_TYPES,
    ParameterValidator,
    is_defined,
    is_non_empty_str,
    is_number,
)
from miniapp_schema.validation.type_compat import is_ui_type_compatible, is_value_compatible

logger = logging.getLogger(__name__)


class BlockchainActionValidator:
    """
    Validates contract-call actions.

    Usage:
        validator = BlockchainActionValidator(context)
        validated = validator.validate(action)
        validated["blockchainActionType"]   # "payable", "nonpayable", ...
    """

    def __init__(self, context: Optional[ValidationContext] = None):
        self.context = ensure_context(context)
        self.parameter_validator = ParameterValidator()

    def validate(self, action: Any, path: Optional[str] = None) -> Dict[str, Any]:
        function = self._check_structure(action, path)

        params = action.get("params")
        if params is not None:
            self._check_parameters(params, function, join_path(path, "params"))

        mutability = function.mutability
        self._check_mutability(action, function, mutability, path)

        abi_params = function.input_dicts()
        if action.get("paramsLabel") is not None:
            abi_params = apply_param_labels(
                abi_params, action["paramsLabel"], join_path(path, "paramsLabel")
            )

        logger.debug(
            "Validated blockchain action '%s' -> %s(%d params, %s)",
            action["label"], function.name, len(abi_params), mutability,
        )

        validated = copy.deepcopy(action)
        validated["abiParams"] = abi_params
        validated["blockchainActionType"] = mutability
        return validated

    # ---- structure ----

    def _check_structure(self, action: Any, path: Optional[str]) -> AbiItem:
        if not isinstance(action, dict):
            raise StructuralError("Blockchain action must be an object", path=path)

        if not is_non_empty_str(action.get("label")):
            raise StructuralError("Blockchain action must have a valid label", path=join_path(path, "label"))

        address = action.get("address")
        if not isinstance(address, str) or not address.startswith("0x"):
            raise InvalidAddressError(
                "Blockchain action must have a contract address (0x... format)",
                path=join_path(path, "address"),
            )
        if not is_address(address):
            raise InvalidAddressError(f"Invalid address: {address}", path=join_path(path, "address"))

        items = parse_abi(action.get("abi"), path=join_path(path, "abi"))

        function_name = action.get("functionName")
        if not is_non_empty_str(function_name):
            raise StructuralError(
                "Blockchain action must have a valid functionName", path=join_path(path, "functionName")
            )

        function = find_function(items, function_name)
        if function is None:
            raise FunctionNotFound(
                f"Function '{function_name}' not found in ABI", path=join_path(path, "functionName")
            )

        validate_chain_context(action.get("chains"), self.context, join_path(path, "chains"))

        amount = action.get("amount")
        if amount is not None and (not is_number(amount) or amount < 0):
            raise StructuralError(
                "If provided, 'amount' must be a non-negative number", path=join_path(path, "amount")
            )

        return function

    # ---- parameters ----

    def _check_parameters(self, params: Any, function: AbiItem, path: Optional[str]) -> None:
        if not isinstance(params, list):
            raise StructuralError("Parameters must be a list", path=path)

        if len(params) != len(function.inputs):
            raise ParameterCountMismatch(
                f"Function '{function.name}' expects {len(function.inputs)} parameters, "
                f"got {len(params)}",
                path=path,
            )

        for index, (param, abi_param) in enumerate(zip(params, function.inputs)):
            param_path = f"{path}[{index}]"
            if not isinstance(param, dict):
                raise StructuralError("Parameter must be an object", path=param_path)

            if param.get("name") != abi_param.name:
                raise ParameterOrderMismatch(
                    f"Parameter at position {index} is '{param.get('name')}' but the ABI "
                    f"expects '{abi_param.name}'",
                    path=join_path(param_path, "name"),
                )

            self.parameter_validator.validate(param, param_path)
            self._check_compatibility(param, abi_param.type, param_path)

    def _check_compatibility(self, param: Dict[str, Any], abi_type: str, path: str) -> None:
        name = param["name"]
        kind = param["type"]

        if kind in SELECTION_TYPES:
            for index, option in enumerate(param["options"]):
                if not is_value_compatible(option["value"], abi_type):
                    raise TypeIncompatibility(
                        f"Option value '{option['value']}' of parameter '{name}' is not "
                        f"compatible with ABI type '{abi_type}'",
                        path=f"{path}.options[{index}].value",
                    )
        elif not is_ui_type_compatible(kind, abi_type):
            raise TypeIncompatibility(
                f"Parameter '{name}' type '{kind}' is not compatible with ABI type '{abi_type}'",
                path=join_path(path, "type"),
            )

        if param.get("fixed") is True:
            if not is_defined(param, "value"):
                raise FixedValueMissing(
                    f"Parameter '{name}' is fixed but has no value", path=join_path(path, "value")
                )
            if not is_value_compatible(param["value"], abi_type):
                raise TypeIncompatibility(
                    f"Fixed value for parameter '{name}' is not compatible with ABI type '{abi_type}'",
                    path=join_path(path, "value"),
                )
        elif is_defined(param, "value") and not is_value_compatible(param["value"], abi_type):
            raise TypeIncompatibility(
                f"Default value for parameter '{name}' is not compatible with ABI type '{abi_type}'",
                path=join_path(path, "value"),
            )

    # ---- mutability ----

    def _check_mutability(
        self, action: Dict[str, Any], function: AbiItem, mutability: str, path: Optional[str]
    ) -> None:
        amount_supplied = action.get("amount") is not None

        if mutability != "payable":
            # an `amount` ABI input is a call argument, never the native value sent
            if amount_supplied:
                raise MutabilityMismatch(
                    f"Function '{function.name}' is {mutability}; 'amount' must not be provided",
                    path=join_path(path, "amount"),
                )
            return

        if not amount_supplied and not has_input_named(function, "amount"):
            message = f"Payable function '{function.name}' has no 'amount' to send"
            if self.context.config.strict_payable_amount:
                raise MutabilityMismatch(message, path=join_path(path, "amount"))
            self.context.add_warning(MutabilityMismatch.code, message, join_path(path, "amount"))


def apply_param_labels(abi_params: List[dict], labels: Any, path: Optional[str] = None) -> List[dict]:
    """
    Return relabelled copies of ABI parameters (legacy paramsLabel support).

    Labels apply by position; tuple parameters pass the same label list to
    their components. The original name is kept under 'originalName'. The
    list may be as long as the widest level it labels: the top-level inputs
    or the components of any tuple.
    """
    if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
        raise StructuralError("paramsLabel must be a list of strings", path=path)
    slots = _label_slots(abi_params)
    if len(labels) > slots:
        raise StructuralError(
            f"Too many parameter labels provided: expected {slots}, got {len(labels)}",
            path=path,
        )
    return [_relabel(param, labels, index) for index, param in enumerate(abi_params)]


def _label_slots(params: List[dict]) -> int:
    widest = len(params)
    for param in params:
        components = param.get("components")
        if str(param.get("type", "")).startswith("tuple") and components:
            widest = max(widest, _label_slots(components))
    return widest


def _relabel(param: dict, labels: List[str], index: int) -> dict:
    updated = copy.deepcopy(param)
    components = param.get("components")
    if str(param.get("type", "")).startswith("tuple") and components:
        updated["components"] = [_relabel(c, labels, i) for i, c in enumerate(components)]
    elif index < len(labels) and labels[index]:
        updated["originalName"] = param.get("name", "")
        updated["name"] = labels[index]
    return updated


def is_blockchain_action_metadata(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("label"), str)
        and isinstance(obj.get("address"), str)
        and isinstance(obj.get("abi"), list)
        and isinstance(obj.get("functionName"), str)
        and isinstance(obj.get("chains"), dict)
        and isinstance(obj["chains"].get("source"), str)
    )


def is_blockchain_action(obj: Any) -> bool:
    """True for contract-call actions that already went through validation."""
    return (
        is_blockchain_action_metadata(obj)
        and isinstance(obj.get("abiParams"), list)
        and isinstance(obj.get("blockchainActionType"), str)
    )


def validate_blockchain_action(
    action: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = None,
) -> Dict[str, Any]:
    """Convenience function to validate one contract-call action."""
    return BlockchainActionValidator(context).validate(action, path=path)
