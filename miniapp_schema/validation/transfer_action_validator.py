import copy
import logging
from typing import Any, Dict, Optional

from miniapp_schema.ir.errors import EmptyOptionSet, InvalidAddressError, StructuralError, join_path
from miniapp_schema.utils.addresses import is_address
from miniapp_schema.validation.chain_validator import validate_chain_context
from miniapp_schema.validation.context import ValidationContext, ensure_context
from miniapp_schema.validation.parameter_validator import is_defined, is_non_empty_str, is_number

logger = logging.getLogger(__name__)

RECIPIENT_INPUT_TYPES = ("select", "input")
AMOUNT_INPUT_TYPES = ("select", "radio", "input")
PLACEHOLDER_MARKER = "{{"


class TransferActionValidator:
    """
    Validates native value transfers.

    The recipient is either a direct `to` address or a `recipient` input
    configuration; a transfer may carry neither when the recipient is
    supplied later. The amount is either a direct `amount` or an
    `amountConfig` input configuration.
    """

    def __init__(self, context: Optional[ValidationContext] = None, allow_placeholders: bool = False):
        self.context = ensure_context(context)
        # flow nodes may template `to` with values produced by earlier steps
        self.allow_placeholders = allow_placeholders

    def validate(self, action: Any, path: Optional[str] = None) -> Dict[str, Any]:
        self._check_basic_fields(action, path)
        validate_chain_context(action.get("chains"), self.context, join_path(path, "chains"))
        self._check_recipient(action, path)
        self._check_amount(action, path)

        logger.debug("Validated transfer action '%s'", action["label"])
        return copy.deepcopy(action)

    def _check_basic_fields(self, action: Any, path: Optional[str]) -> None:
        if not isinstance(action, dict):
            raise StructuralError("Transfer action must be an object", path=path)
        if not is_non_empty_str(action.get("label")):
            raise StructuralError("Transfer action must have a valid label", path=join_path(path, "label"))
        if "description" in action and not isinstance(action["description"], str):
            raise StructuralError(
                "If provided, description must be a string", path=join_path(path, "description")
            )

    def _check_recipient(self, action: Dict[str, Any], path: Optional[str]) -> None:
        has_to = is_defined(action, "to")
        has_recipient = is_defined(action, "recipient")

        if has_to and has_recipient:
            raise StructuralError(
                "Provide either 'to' or 'recipient', not both", path=join_path(path, "recipient")
            )

        if has_to:
            to = action["to"]
            to_path = join_path(path, "to")
            if not isinstance(to, str):
                raise InvalidAddressError("Recipient address must be a string", path=to_path)
            if self.allow_placeholders and PLACEHOLDER_MARKER in to:
                return
            if not is_address(to):
                raise InvalidAddressError(f"Invalid recipient address: {to}", path=to_path)

        if has_recipient:
            recipient = action["recipient"]
            recipient_path = join_path(path, "recipient")
            if not isinstance(recipient, dict):
                raise StructuralError("Recipient configuration must be an object", path=recipient_path)
            input_type = recipient.get("inputType")
            if input_type not in RECIPIENT_INPUT_TYPES:
                raise StructuralError(
                    f"Invalid recipient input type: {input_type}",
                    path=join_path(recipient_path, "inputType"),
                )
            if input_type == "select":
                _check_options(recipient.get("options"), "Recipient", join_path(recipient_path, "options"))

    def _check_amount(self, action: Dict[str, Any], path: Optional[str]) -> None:
        if is_defined(action, "amount"):
            amount = action["amount"]
            if not is_number(amount) or amount <= 0:
                raise StructuralError("Amount must be a positive number", path=join_path(path, "amount"))

        if not is_defined(action, "amountConfig"):
            return

        config = action["amountConfig"]
        config_path = join_path(path, "amountConfig")
        if not isinstance(config, dict):
            raise StructuralError("Amount configuration must be an object", path=config_path)

        input_type = config.get("inputType")
        if input_type is not None and input_type not in AMOUNT_INPUT_TYPES:
            raise StructuralError(
                f"Invalid amount input type: {input_type}", path=join_path(config_path, "inputType")
            )
        if input_type in ("select", "radio"):
            _check_options(config.get("options"), "Amount", join_path(config_path, "options"))

        if is_defined(config, "defaultValue") and not is_number(config["defaultValue"]):
            raise StructuralError("Default amount must be a number", path=join_path(config_path, "defaultValue"))


def _check_options(options: Any, owner: str, path: Optional[str]) -> None:
    if options is None or (isinstance(options, list) and not options):
        raise EmptyOptionSet(f"{owner} options must be a non-empty list", path=path)
    if not isinstance(options, list):
        raise StructuralError(f"{owner} options must be a list", path=path)


def is_transfer_action(obj: Any) -> bool:
    if not isinstance(obj, dict) or not isinstance(obj.get("label"), str):
        return False
    chains = obj.get("chains")
    if not isinstance(chains, dict) or not isinstance(chains.get("source"), str):
        return False

    has_transfer_fields = any(key in obj for key in ("to", "amount", "recipient", "amountConfig"))
    has_contract_fields = any(key in obj for key in ("address", "abi", "functionName"))
    return has_transfer_fields and not has_contract_fields


def validate_transfer_action(
    action: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = None,
) -> Dict[str, Any]:
    return TransferActionValidator(context).validate(action, path=path)
