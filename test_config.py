"""Tests for validator configuration"""

import pytest
from pydantic import ValidationError

from miniapp_schema.config import DEFAULT_CONFIG, ValidatorConfig
from miniapp_schema.validation.chain_validator import is_valid_chain
from miniapp_schema.validation.context import ValidationContext


def test_defaults():
    config = ValidatorConfig()
    assert "avalanche" in config.valid_chains
    assert config.allowed_protocols == ("http", "https")
    assert config.max_actions == 4
    assert config.max_string_length == 1000
    assert config.max_url_length == 2000
    assert config.max_description_length == 2000
    assert config.strict_payable_amount is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("MINIAPP_VALID_CHAINS", "localnet, sepolia ,")
    monkeypatch.setenv("MINIAPP_MAX_ACTIONS", "2")
    monkeypatch.setenv("MINIAPP_STRICT_PAYABLE_AMOUNT", "true")

    config = ValidatorConfig.from_env()

    assert config.valid_chains == ("localnet", "sepolia")
    assert config.max_actions == 2
    assert config.strict_payable_amount is True


def test_invalid_numeric_env(monkeypatch):
    monkeypatch.setenv("MINIAPP_MAX_ACTIONS", "many")
    with pytest.raises(ValueError):
        ValidatorConfig.from_env()


def test_limits_must_be_positive():
    with pytest.raises(ValidationError):
        ValidatorConfig(max_actions=0)


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.max_actions = 10


def test_context_uses_its_own_config():
    context = ValidationContext(config=ValidatorConfig(valid_chains=("localnet",)))
    assert is_valid_chain("localnet", context)
    assert not is_valid_chain("avalanche", context)
    assert not is_valid_chain(None, context)
