"""
HTTP Action Validator - validates form actions that submit user input to an
HTTP endpoint.
"""

import copy
import logging
from typing import Any, Dict, Optional

from miniapp_schema.ir.errors import StructuralError, UnknownParameterType, join_path
from miniapp_schema.utils.urls import is_valid_url
from miniapp_schema.validation.context import ValidationContext, ensure_context
from miniapp_schema.validation.dynamic_action_validator import resolve_action_path
from miniapp_schema.validation.parameter_validator import (
    SELECTION_TYPES,
    ParameterValidator,
    is_defined,
    is_non_empty_str,
    is_valid_datetime,
    is_valid_email,
)

logger = logging.getLogger(__name__)

HTTP_STANDARD_TYPES = {"text", "email", "number", "boolean", "url", "datetime", "textarea"}
HTTP_METHODS = {"GET", "POST", "PUT", "DELETE"}

DEFAULT_VALUE_CHECKS = {
    "email": (is_valid_email, "email"),
    "url": (is_valid_url, "URL"),
    "datetime": (is_valid_datetime, "datetime"),
}


class HttpActionValidator:
    """
    Validates form/HTTP actions.

    The target is read from `endpoint` (or `path`) and is either an absolute
    URL or a '/'-relative path resolved against the metadata baseUrl.
    """

    def __init__(self, context: Optional[ValidationContext] = None):
        self.context = ensure_context(context)
        self.parameter_validator = ParameterValidator()

    def validate(self, action: Any, path: Optional[str] = None) -> Dict[str, Any]:
        if not isinstance(action, dict):
            raise StructuralError("HTTP action must be an object", path=path)
        if not is_non_empty_str(action.get("label")):
            raise StructuralError("HTTP action must have a valid label", path=join_path(path, "label"))

        self._check_target(action, path)
        self._check_request_options(action, path)

        params = action.get("params")
        if params is not None:
            params_path = join_path(path, "params")
            if not isinstance(params, list):
                raise StructuralError("Parameters must be a list", path=params_path)
            for index, param in enumerate(params):
                self._check_parameter(param, f"{params_path}[{index}]")

        logger.debug("Validated http action '%s'", action["label"])
        return copy.deepcopy(action)

    def _check_target(self, action: Dict[str, Any], path: Optional[str]) -> None:
        key = "endpoint" if "endpoint" in action else "path"
        target = action.get(key)
        target_path = join_path(path, key)

        if not is_non_empty_str(target):
            raise StructuralError("HTTP action must have an endpoint", path=target_path)
        if target.startswith("/"):
            resolve_action_path(target, self.context.base_url, target_path)
        elif not is_valid_url(target):
            raise StructuralError(f"Invalid endpoint URL: {target}", path=target_path)

    def _check_request_options(self, action: Dict[str, Any], path: Optional[str]) -> None:
        method = action.get("method")
        if method is not None and (not isinstance(method, str) or method not in HTTP_METHODS):
            raise StructuralError(
                f"Invalid HTTP method: {method}. Use one of: {', '.join(sorted(HTTP_METHODS))}",
                path=join_path(path, "method"),
            )

        headers = action.get("headers")
        if headers is not None:
            if not isinstance(headers, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
            ):
                raise StructuralError(
                    "Headers must map header names to string values", path=join_path(path, "headers")
                )

    def _check_parameter(self, param: Any, path: str) -> None:
        self.parameter_validator.check_envelope(param, path)
        kind = param["type"]

        if kind in SELECTION_TYPES:
            self.parameter_validator.validate_selection(param, path, default_keys=("value", "defaultValue"))
            return
        if kind not in HTTP_STANDARD_TYPES:
            raise UnknownParameterType(
                f"Invalid parameter type '{kind}' for parameter '{param['name']}'",
                path=join_path(path, "type"),
            )

        self.parameter_validator.validate_standard(param, path)

        check = DEFAULT_VALUE_CHECKS.get(kind)
        if check is None:
            return
        predicate, label = check
        for key in ("defaultValue", "value"):
            if is_defined(param, key) and not predicate(param[key]):
                raise StructuralError(
                    f"Invalid {label} format for default value in parameter '{param['name']}'",
                    path=join_path(path, key),
                )


def is_http_action(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    if any(key in obj for key in ("abi", "functionName", "to", "address")):
        return False
    if not isinstance(obj.get("label"), str) or not isinstance(obj.get("endpoint"), str):
        return False
    return obj.get("headers") is None or isinstance(obj["headers"], dict)


def validate_http_action(
    action: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = None,
) -> Dict[str, Any]:
    return HttpActionValidator(context).validate(action, path=path)
