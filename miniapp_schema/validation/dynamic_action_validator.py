import copy
import logging
from typing import Any, Dict, Optional

from miniapp_schema.ir.errors import InvalidPathFormat, MissingBaseUrl, StructuralError, join_path
from miniapp_schema.utils.urls import is_valid_url, resolve_url
from miniapp_schema.validation.chain_validator import validate_chain_context
from miniapp_schema.validation.context import ValidationContext, ensure_context
from miniapp_schema.validation.parameter_validator import ParameterValidator, is_non_empty_str

logger = logging.getLogger(__name__)


def resolve_action_path(action_path: Any, base_url: Optional[str], path: Optional[str] = None) -> str:
    """
    Resolve an action path to an absolute URL.

    'http...' paths must already be absolute URLs; '/...' paths are joined
    onto base_url, which then becomes mandatory. Anything else, including
    protocol-relative '//host' paths, is rejected.
    """
    if not is_non_empty_str(action_path):
        raise StructuralError("Action must have a valid path", path=path)

    if action_path.startswith("http"):
        if not is_valid_url(action_path):
            raise InvalidPathFormat(f"Invalid absolute URL: {action_path}", path=path)
        return action_path

    if action_path.startswith("/") and not action_path.startswith("//"):
        if not base_url:
            raise MissingBaseUrl(
                f"Relative path '{action_path}' requires a baseUrl in the metadata", path=path
            )
        resolved = resolve_url(action_path, base_url)
        if resolved is None:
            raise InvalidPathFormat(
                f"Cannot build a valid URL from baseUrl '{base_url}' and path '{action_path}'",
                path=path,
            )
        return resolved

    raise InvalidPathFormat(
        f"Path must be an absolute URL or start with '/': {action_path}", path=path
    )


class DynamicActionValidator:
    """Validates actions whose transaction is resolved remotely at execution time."""

    def __init__(self, context: Optional[ValidationContext] = None):
        self.context = ensure_context(context)
        self.parameter_validator = ParameterValidator()

    def validate(self, action: Any, path: Optional[str] = None) -> Dict[str, Any]:
        if not isinstance(action, dict):
            raise StructuralError("Dynamic action must be an object", path=path)
        if not is_non_empty_str(action.get("label")):
            raise StructuralError("Dynamic action must have a valid label", path=join_path(path, "label"))
        if action.get("type") != "dynamic":
            raise StructuralError('Action type must be "dynamic"', path=join_path(path, "type"))
        if "description" in action and not isinstance(action["description"], str):
            raise StructuralError(
                "If provided, description must be a string", path=join_path(path, "description")
            )

        resolved = resolve_action_path(action.get("path"), self.context.base_url, join_path(path, "path"))
        logger.debug("Dynamic action '%s' resolves to %s", action["label"], resolved)

        params = action.get("params")
        if params is not None:
            params_path = join_path(path, "params")
            if not isinstance(params, list):
                raise StructuralError("Parameters must be a list", path=params_path)
            for index, param in enumerate(params):
                self.parameter_validator.validate(param, f"{params_path}[{index}]")

        validate_chain_context(action.get("chains"), self.context, join_path(path, "chains"))

        return copy.deepcopy(action)


def is_dynamic_action(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and isinstance(obj.get("label"), str)
        and obj.get("type") == "dynamic"
        and isinstance(obj.get("path"), str)
    )


def validate_dynamic_action(
    action: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = None,
) -> Dict[str, Any]:
    return DynamicActionValidator(context).validate(action, path=path)
