"""
Metadata Validator - entry point of the validation pipeline.

Validates the document envelope, classifies every action and hands it to the
matching action validator. The first failure aborts the whole document.

Usage:
    from miniapp_schema import create_metadata, validate

    validated = create_metadata(document)      # raises MiniAppValidationError
    result = validate(document)                # never raises for bad input
    if not result.is_valid:
        print(result.error.code, result.error.message)
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from miniapp_schema.config import DEFAULT_CONFIG, ValidatorConfig
from miniapp_schema.ir.errors import EnvelopeError, MiniAppValidationError, UnknownActionType
from miniapp_schema.ir.validation import ValidationResult
from miniapp_schema.utils.urls import is_allowed_url, is_valid_url
from miniapp_schema.validation.blockchain_action_validator import (
    BlockchainActionValidator,
    is_blockchain_action,
    is_blockchain_action_metadata,
)
from miniapp_schema.validation.context import ValidationContext
from miniapp_schema.validation.dynamic_action_validator import DynamicActionValidator, is_dynamic_action
from miniapp_schema.validation.flow_validator import FlowValidator, is_action_flow
from miniapp_schema.validation.http_action_validator import HttpActionValidator, is_http_action
from miniapp_schema.validation.transfer_action_validator import TransferActionValidator, is_transfer_action

logger = logging.getLogger(__name__)

ACTION_TYPES = ("blockchain", "transfer", "http", "dynamic", "flow")
ENVELOPE_FIELDS = ("url", "icon", "title", "description", "baseUrl")

# Documents written before the `type` discriminant existed are classified by
# shape. Order matters: the first matching guard wins.
LEGACY_GUARDS: List[Tuple[str, Callable[[Any], bool]]] = [
    ("flow", is_action_flow),
    ("blockchain", is_blockchain_action_metadata),
    ("transfer", is_transfer_action),
    ("http", is_http_action),
    ("dynamic", is_dynamic_action),
]


class MetadataValidator:
    """
    Validates complete mini-app metadata documents.

    A validator holds only configuration; every run gets a fresh
    ValidationContext, so one instance can be reused across documents.
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def create(self, document: Any) -> Dict[str, Any]:
        return self._run(document, ValidationContext(config=self.config))

    def validate(self, document: Any) -> ValidationResult:
        context = ValidationContext(config=self.config)
        try:
            data = self._run(document, context)
        except MiniAppValidationError as exc:
            logger.info("Metadata rejected: %s", exc)
            return ValidationResult.failure([exc.to_issue()], warnings=context.warnings)
        return ValidationResult.success(data, warnings=context.warnings)

    def _run(self, document: Any, context: ValidationContext) -> Dict[str, Any]:
        self._check_envelope(document)
        context.base_url = document.get("baseUrl")

        validators = {
            "blockchain": BlockchainActionValidator(context),
            "transfer": TransferActionValidator(context),
            "http": HttpActionValidator(context),
            "dynamic": DynamicActionValidator(context),
            "flow": FlowValidator(context),
        }

        actions = []
        for index, action in enumerate(document["actions"]):
            path = f"actions[{index}]"
            kind = self._classify(action, path)
            logger.debug("Dispatching %s to %s validator", path, kind)
            actions.append(validators[kind].validate(action, path=path))

        validated = {key: copy.deepcopy(document[key]) for key in ENVELOPE_FIELDS if key in document}
        validated["actions"] = actions
        return validated

    # ---- envelope ----

    def _check_envelope(self, document: Any) -> None:
        if not isinstance(document, dict):
            raise EnvelopeError("Metadata must be a valid object")

        self._check_url_field(document, "url")
        self._check_url_field(document, "icon")
        self._check_string_field(document, "title", self.config.max_string_length)
        self._check_string_field(document, "description", self.config.max_description_length)
        if document.get("baseUrl") is not None:
            self._check_url_field(document, "baseUrl")

        actions = document.get("actions")
        if not isinstance(actions, list):
            raise EnvelopeError("Metadata must have a valid actions array", path="actions")
        if not actions:
            raise EnvelopeError("Metadata must include at least one action", path="actions")
        if len(actions) > self.config.max_actions:
            raise EnvelopeError(
                f"Maximum {self.config.max_actions} actions allowed, got {len(actions)}",
                path="actions",
            )

        for index, action in enumerate(actions):
            if not isinstance(action, dict):
                raise EnvelopeError(f"Action at index {index} must be a valid object", path=f"actions[{index}]")

    def _check_string_field(self, document: Dict[str, Any], name: str, max_length: int) -> str:
        value = document.get(name)
        if not isinstance(value, str) or not value:
            raise EnvelopeError(f"Metadata missing required '{name}' field", path=name)
        if len(value) > max_length:
            raise EnvelopeError(f"{name} exceeds maximum length of {max_length} characters", path=name)
        return value

    def _check_url_field(self, document: Dict[str, Any], name: str) -> None:
        value = self._check_string_field(document, name, self.config.max_url_length)
        if not is_valid_url(value):
            raise EnvelopeError(f"Invalid {name} format", path=name)
        if not is_allowed_url(value, self.config.allowed_protocols):
            allowed = ", ".join(self.config.allowed_protocols)
            raise EnvelopeError(f"{name} must use one of these protocols: {allowed}", path=name)

    # ---- dispatch ----

    def _classify(self, action: Dict[str, Any], path: str) -> str:
        kind = action.get("type")
        if kind is not None:
            if kind not in ACTION_TYPES:
                raise UnknownActionType(
                    f"Action has invalid type: '{kind}'. Must be one of: {', '.join(ACTION_TYPES)}",
                    path=f"{path}.type",
                )
            return kind

        for legacy_kind, guard in LEGACY_GUARDS:
            if guard(action):
                logger.debug("Untyped action at %s classified as %s", path, legacy_kind)
                return legacy_kind

        raise UnknownActionType(
            f'Unknown action type for action with label "{action.get("label", "N/A")}"', path=path
        )


def is_validated_metadata(obj: Any) -> bool:
    """True when obj looks like create_metadata output."""
    if not isinstance(obj, dict):
        return False
    if not all(isinstance(obj.get(key), str) for key in ("url", "icon", "title", "description")):
        return False
    actions = obj.get("actions")
    if not isinstance(actions, list) or not actions:
        return False
    return all(_is_validated_action(action) for action in actions)


def _is_validated_action(action: Any) -> bool:
    if not isinstance(action, dict):
        return False
    if action.get("type") == "flow":
        return all(_is_validated_action(node) for node in action.get("actions") or [])
    if action.get("type") == "blockchain" or is_blockchain_action_metadata(action):
        return is_blockchain_action(action)
    return True


def create_metadata(document: Any, config: Optional[ValidatorConfig] = None) -> Dict[str, Any]:
    """Validate a document and return its normalized copy, raising on the first failure."""
    return MetadataValidator(config).create(document)


def validate(document: Any, config: Optional[ValidatorConfig] = None) -> ValidationResult:
    """Validate a document without raising for validation failures."""
    return MetadataValidator(config).validate(document)
