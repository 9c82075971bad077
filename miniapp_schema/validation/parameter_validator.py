"""
Parameter Validator - validates the user-facing parameter declarations shared
by contract-call, http and dynamic actions.

Catches issues like:
- Missing name / label / type
- Inverted min/max and minLength/maxLength bounds
- Regex patterns that do not compile
- Malformed email / url / address values
- Empty, duplicated or undersized option lists on select/radio parameters
"""

import json
import math
import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from miniapp_schema.ir.errors import (
    DuplicateOption,
    EmptyOptionSet,
    StructuralError,
    join_path,
)
from miniapp_schema.utils.addresses import is_address_or_sender
from miniapp_schema.utils.urls import is_valid_url

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[\w\-.]+@([\w-]+\.)+[\w-]{2,4}")
SELECTION_TYPES = {"select", "radio"}
STANDARD_UI_TYPES = {"text", "number", "boolean", "email", "url", "datetime", "textarea", "address"}


# -------------------------
# Shared predicates
# -------------------------

def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_defined(mapping: Dict[str, Any], key: str) -> bool:
    return key in mapping and mapping[key] is not None


def is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_RE.fullmatch(value) is not None


def is_valid_datetime(value: Any) -> bool:
    if is_number(value):
        return True
    if not isinstance(value, str) or not value:
        return False
    candidate = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        return False
    return True


def option_key(value: Any) -> tuple:
    """Equality key for option values: bools never equal numbers, objects compare deeply."""
    if isinstance(value, bool):
        return ("bool", value)
    if is_number(value):
        return ("number", value)
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, (dict, list, tuple)):
        try:
            return ("json", json.dumps(value, sort_keys=True, default=repr))
        except TypeError:
            # mixed key types cannot be sorted
            return ("repr", repr(value))
    return ("other", repr(value))


def values_equal(left: Any, right: Any) -> bool:
    return option_key(left) == option_key(right)


def compile_pattern(pattern: Any, name: str, path: Optional[str]) -> None:
    if not isinstance(pattern, str):
        raise StructuralError(
            f"Parameter '{name}' has a pattern that is not a string",
            path=join_path(path, "pattern"),
        )
    try:
        re.compile(pattern)
    except re.error as exc:
        raise StructuralError(
            f"Invalid regex pattern for parameter '{name}': {exc}",
            path=join_path(path, "pattern"),
        ) from exc


class ParameterValidator:
    """
    Validates a single parameter declaration and raises on the first problem.

    Usage:
        ParameterValidator().validate(param, path="actions[0].params[1]")
    """

    def validate(self, param: Any, path: Optional[str] = None) -> None:
        self.check_envelope(param, path)
        logger.debug("Validating %s parameter '%s'", param["type"], param["name"])
        if param["type"] in SELECTION_TYPES:
            self.validate_selection(param, path)
        else:
            self.validate_standard(param, path)

    def check_envelope(self, param: Any, path: Optional[str]) -> None:
        if not isinstance(param, dict):
            raise StructuralError("Parameter must be an object", path=path)

        if not is_non_empty_str(param.get("name")):
            raise StructuralError("Parameter missing required 'name' field", path=join_path(path, "name"))

        name = param["name"]
        if not is_non_empty_str(param.get("label")):
            raise StructuralError(
                f"Parameter '{name}' missing required 'label' field", path=join_path(path, "label")
            )
        if not is_non_empty_str(param.get("type")):
            raise StructuralError(
                f"Parameter '{name}' missing required 'type' field", path=join_path(path, "type")
            )

        for key in ("required", "fixed"):
            if key in param and not isinstance(param[key], bool):
                raise StructuralError(
                    f"Parameter '{name}' field '{key}' must be a boolean",
                    path=join_path(path, key),
                )
        if "description" in param and not isinstance(param["description"], str):
            raise StructuralError(
                f"Parameter '{name}' field 'description' must be a string",
                path=join_path(path, "description"),
            )

    def validate_standard(self, param: Dict[str, Any], path: Optional[str] = None) -> None:
        name = param["name"]

        for key in ("minLength", "maxLength"):
            if key in param and (not is_number(param[key]) or param[key] < 0):
                raise StructuralError(
                    f"Parameter '{name}' has an invalid {key}", path=join_path(path, key)
                )
        for key in ("min", "max"):
            if key in param and not is_number(param[key]):
                raise StructuralError(
                    f"Parameter '{name}' has an invalid {key}", path=join_path(path, key)
                )

        if "minLength" in param and "maxLength" in param and param["minLength"] > param["maxLength"]:
            raise StructuralError(
                f"Parameter '{name}' has minLength ({param['minLength']}) greater than "
                f"maxLength ({param['maxLength']})",
                path=join_path(path, "minLength"),
            )
        if "min" in param and "max" in param and param["min"] > param["max"]:
            raise StructuralError(
                f"Parameter '{name}' has min ({param['min']}) greater than max ({param['max']})",
                path=join_path(path, "min"),
            )

        if param.get("pattern"):
            compile_pattern(param["pattern"], name, path)

        value = param.get("value")
        if not isinstance(value, str):
            return

        kind = param["type"]
        if kind == "email" and not is_valid_email(value):
            raise StructuralError(
                f"Invalid email format for parameter '{name}': {value}", path=join_path(path, "value")
            )
        if kind == "url" and not is_valid_url(value):
            raise StructuralError(
                f"Invalid URL format for parameter '{name}': {value}", path=join_path(path, "value")
            )
        if kind == "address" and not is_address_or_sender(value):
            raise StructuralError(
                f"Invalid address format for parameter '{name}': {value}",
                path=join_path(path, "value"),
            )

    def validate_selection(
        self,
        param: Dict[str, Any],
        path: Optional[str] = None,
        default_keys: Iterable[str] = ("value",),
    ) -> None:
        name = param["name"]
        kind = param["type"]
        options = param.get("options")
        options_path = join_path(path, "options")

        if options is None or (isinstance(options, list) and not options):
            raise EmptyOptionSet(
                f"{kind} parameter '{name}' must have at least one option", path=options_path
            )
        if not isinstance(options, list):
            raise StructuralError(f"{kind} parameter '{name}' options must be a list", path=options_path)

        seen_values = set()
        seen_labels = set()
        for index, option in enumerate(options):
            option_path = f"{options_path}[{index}]"
            if not isinstance(option, dict):
                raise StructuralError(f"Option in parameter '{name}' must be an object", path=option_path)
            if not is_non_empty_str(option.get("label")):
                raise StructuralError(
                    f"Option missing required 'label' in parameter '{name}'",
                    path=join_path(option_path, "label"),
                )
            if not is_defined(option, "value"):
                raise StructuralError(
                    f"Option missing required 'value' in parameter '{name}'",
                    path=join_path(option_path, "value"),
                )

            key = option_key(option["value"])
            if key in seen_values:
                raise DuplicateOption(
                    f"Duplicate value '{option['value']}' in {kind} parameter '{name}'",
                    path=join_path(option_path, "value"),
                )
            seen_values.add(key)

            if option["label"] in seen_labels:
                raise DuplicateOption(
                    f"Duplicate label '{option['label']}' in {kind} parameter '{name}'",
                    path=join_path(option_path, "label"),
                )
            seen_labels.add(option["label"])

        if kind == "radio" and len(options) < 2:
            raise StructuralError(
                f"radio parameter '{name}' must have at least 2 options", path=options_path
            )

        for default_key in default_keys:
            if not is_defined(param, default_key):
                continue
            default = param[default_key]
            if not any(values_equal(default, option["value"]) for option in options):
                raise StructuralError(
                    f"Default value '{default}' of parameter '{name}' is not one of its options",
                    path=join_path(path, default_key),
                )


def validate_parameter(param: Any, path: Optional[str] = None) -> None:
    """Convenience function to validate one parameter declaration."""
    ParameterValidator().validate(param, path=path)
