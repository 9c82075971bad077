"""Tests for dynamic action validation and path resolution"""

import pytest

from miniapp_schema.ir.errors import (
    InvalidChainError,
    InvalidPathFormat,
    MissingBaseUrl,
    StructuralError,
)
from miniapp_schema.validation.context import ValidationContext
from miniapp_schema.validation.dynamic_action_validator import (
    DynamicActionValidator,
    is_dynamic_action,
    resolve_action_path,
    validate_dynamic_action,
)

BASE_URL = "https://api.example.com"


def make_action(**overrides) -> dict:
    action = {
        "type": "dynamic",
        "label": "Best swap",
        "description": "Route resolved by the server",
        "path": "/swap",
        "chains": {"source": "avalanche"},
    }
    action.update(overrides)
    return action


def with_base_url(base_url=BASE_URL) -> DynamicActionValidator:
    return DynamicActionValidator(ValidationContext(base_url=base_url))


def test_relative_path_without_base_url():
    with pytest.raises(MissingBaseUrl):
        validate_dynamic_action(make_action())


def test_relative_path_with_base_url():
    validated = with_base_url().validate(make_action())
    assert validated["path"] == "/swap"


def test_absolute_path_needs_no_base_url():
    validate_dynamic_action(make_action(path="https://quotes.example.org/v1/swap"))


@pytest.mark.parametrize("path", ["swap", "./swap", "ftp://example.com/swap", "//example.com/swap"])
def test_other_path_shapes_are_rejected(path):
    with pytest.raises(InvalidPathFormat):
        with_base_url().validate(make_action(path=path))


def test_malformed_absolute_url():
    with pytest.raises(InvalidPathFormat):
        validate_dynamic_action(make_action(path="https://"))


def test_unusable_base_url():
    with pytest.raises(InvalidPathFormat):
        with_base_url("not a url").validate(make_action())


def test_type_must_be_dynamic():
    with pytest.raises(StructuralError, match="dynamic"):
        with_base_url().validate(make_action(type="http"))


def test_path_required():
    action = make_action()
    del action["path"]
    with pytest.raises(StructuralError, match="path"):
        with_base_url().validate(action)


def test_description_is_optional_but_typed():
    action = make_action()
    del action["description"]
    with_base_url().validate(action)
    with pytest.raises(StructuralError):
        with_base_url().validate(make_action(description=["swap"]))


def test_embedded_params_are_validated():
    params = [{"name": "slippage", "label": "Slippage", "type": "number", "min": 5, "max": 1}]
    with pytest.raises(StructuralError, match="greater than"):
        with_base_url().validate(make_action(params=params))


def test_chain_source_required():
    action = make_action()
    del action["chains"]
    with pytest.raises(InvalidChainError):
        with_base_url().validate(action)


def test_resolve_action_path():
    assert resolve_action_path("/swap", BASE_URL) == "https://api.example.com/swap"
    assert resolve_action_path("/v2/swap?x=1", BASE_URL + "/") == "https://api.example.com/v2/swap?x=1"
    assert resolve_action_path("https://other.example.com/a", None) == "https://other.example.com/a"


def test_dynamic_guard():
    assert is_dynamic_action(make_action())
    assert not is_dynamic_action(make_action(type="http"))
