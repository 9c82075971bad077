"""Tests for the metadata entry points and action dispatch"""

import copy

import pytest

from miniapp_schema import (
    EnvelopeError,
    InvalidChainError,
    MissingBaseUrl,
    MutabilityMismatch,
    StructuralError,
    UnknownActionType,
    UnreachableNodeError,
    ValidatorConfig,
    create_metadata,
    is_validated_metadata,
    validate,
)

TOKEN = "0x5425890298aed601595a70ab815c96711a31bc65"
SPENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
MAX_UINT256 = "115792089237316195423570985008687907853269984665640564039457584007913129639935"

APPROVE_ABI = [{
    "type": "function",
    "name": "approve",
    "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
    "outputs": [{"name": "", "type": "bool"}],
    "stateMutability": "nonpayable",
}]


def make_approve(**overrides) -> dict:
    action = {
        "type": "blockchain",
        "label": "Approve",
        "address": TOKEN,
        "abi": APPROVE_ABI,
        "functionName": "approve",
        "chains": {"source": "avalanche"},
        "params": [
            {"name": "spender", "label": "Spender", "type": "address", "value": SPENDER, "fixed": True},
            {"name": "amount", "label": "Amount", "type": "number", "value": MAX_UINT256, "fixed": True},
        ],
    }
    action.update(overrides)
    return action


def make_transfer(**overrides) -> dict:
    action = {"type": "transfer", "label": "Tip", "to": RECIPIENT, "amount": 0.01, "chains": {"source": "avalanche"}}
    action.update(overrides)
    return action


def make_dynamic(**overrides) -> dict:
    action = {"type": "dynamic", "label": "Swap", "path": "/swap", "chains": {"source": "avalanche"}}
    action.update(overrides)
    return action


def make_metadata(*actions, **overrides) -> dict:
    document = {
        "url": "https://miniapp.example.com",
        "icon": "https://miniapp.example.com/icon.png",
        "title": "Token tools",
        "description": "Approve, tip and swap",
        "actions": list(actions) or [make_transfer()],
    }
    document.update(overrides)
    return document


# -------------------------
# End-to-end scenarios
# -------------------------

def test_approve_document():
    validated = create_metadata(make_metadata(make_approve()))
    assert validated["actions"][0]["blockchainActionType"] == "nonpayable"
    assert is_validated_metadata(validated)


def test_amount_on_non_payable_document():
    with pytest.raises(MutabilityMismatch) as exc_info:
        create_metadata(make_metadata(make_approve(amount=0.1)))
    assert exc_info.value.path == "actions[0].amount"


def test_transfer_chain_check():
    create_metadata(make_metadata(make_transfer()))
    with pytest.raises(InvalidChainError):
        create_metadata(make_metadata(make_transfer(chains={"source": "not-a-chain"})))


def test_flow_with_orphan_node():
    flow = {
        "type": "flow",
        "label": "Steps",
        "initialActionId": "A",
        "actions": [
            {"id": "A", "type": "transfer", "label": "Pay", "to": RECIPIENT, "amount": 1,
             "chains": {"source": "fuji"}, "nextActions": [{"actionId": "B"}]},
            {"id": "B", "type": "completion", "message": "Paid", "status": "success"},
            {"id": "C", "type": "completion", "message": "Never shown", "status": "info"},
        ],
    }
    with pytest.raises(UnreachableNodeError) as exc_info:
        create_metadata(make_metadata(flow))
    assert exc_info.value.node_ids == ["C"]
    assert exc_info.value.path == "actions[0].actions"


def test_dynamic_action_and_base_url():
    with pytest.raises(MissingBaseUrl):
        create_metadata(make_metadata(make_dynamic()))
    validated = create_metadata(make_metadata(make_dynamic(), baseUrl="https://api.example.com"))
    assert validated["baseUrl"] == "https://api.example.com"


# -------------------------
# Envelope
# -------------------------

@pytest.mark.parametrize("field", ["url", "icon", "title", "description"])
def test_required_envelope_fields(field):
    document = make_metadata()
    del document[field]
    with pytest.raises(EnvelopeError) as exc_info:
        create_metadata(document)
    assert exc_info.value.path == field


@pytest.mark.parametrize("url", ["ftp://miniapp.example.com", "javascript:alert(1)", "not a url"])
def test_url_protocol_allow_list(url):
    with pytest.raises(EnvelopeError):
        create_metadata(make_metadata(url=url))


def test_length_limits():
    with pytest.raises(EnvelopeError, match="maximum length"):
        create_metadata(make_metadata(title="t" * 1001))
    with pytest.raises(EnvelopeError, match="maximum length"):
        create_metadata(make_metadata(description="d" * 2001))
    with pytest.raises(EnvelopeError, match="maximum length"):
        create_metadata(make_metadata(icon="https://example.com/" + "i" * 2000))
    create_metadata(make_metadata(title="t" * 1000, description="d" * 2000))


def test_action_count_bounds():
    with pytest.raises(EnvelopeError, match="at least one"):
        create_metadata(make_metadata(actions=[]))
    with pytest.raises(EnvelopeError, match="Maximum 4"):
        create_metadata(make_metadata(*[make_transfer(label=f"Tip {i}") for i in range(5)]))
    create_metadata(make_metadata(*[make_transfer(label=f"Tip {i}") for i in range(4)]))


def test_custom_limits_and_protocols():
    config = ValidatorConfig(max_actions=1, allowed_protocols=("https", "ipfs"))
    with pytest.raises(EnvelopeError):
        create_metadata(make_metadata(make_transfer(), make_transfer()), config=config)
    create_metadata(make_metadata(icon="ipfs://bafybeigdyrzt/icon.png"), config=config)


def test_non_object_documents():
    with pytest.raises(EnvelopeError):
        create_metadata(["not", "a", "dict"])
    with pytest.raises(EnvelopeError):
        create_metadata(make_metadata(actions=["transfer"]))


def test_invalid_base_url():
    with pytest.raises(EnvelopeError):
        create_metadata(make_metadata(baseUrl="/relative"))


# -------------------------
# Dispatch
# -------------------------

def test_unknown_discriminant():
    with pytest.raises(UnknownActionType):
        create_metadata(make_metadata(make_transfer(type="swap")))


def test_discriminant_wins_over_shape():
    # shaped like a transfer, declared as http
    with pytest.raises(StructuralError, match="endpoint"):
        create_metadata(make_metadata(make_transfer(type="http")))


def test_legacy_documents_without_type():
    approve = make_approve()
    del approve["type"]
    transfer = make_transfer()
    del transfer["type"]
    form = {"label": "Subscribe", "endpoint": "https://api.example.com/subscribe"}

    validated = create_metadata(make_metadata(approve, transfer, form))
    assert validated["actions"][0]["blockchainActionType"] == "nonpayable"
    assert "abiParams" not in validated["actions"][1]


def test_unclassifiable_legacy_action():
    with pytest.raises(UnknownActionType, match="Mystery"):
        create_metadata(make_metadata({"label": "Mystery"}))


def test_errors_carry_action_path():
    document = make_metadata(make_transfer(), make_approve(functionName="transferFrom"))
    with pytest.raises(StructuralError) as exc_info:
        create_metadata(document)
    assert exc_info.value.path == "actions[1].functionName"
    assert exc_info.value.code == "FUNCTION_NOT_FOUND"


def test_relative_form_uses_base_url():
    form = {"type": "http", "label": "Subscribe", "path": "/subscribe"}
    with pytest.raises(MissingBaseUrl):
        create_metadata(make_metadata(form))
    create_metadata(make_metadata(form, baseUrl="https://api.example.com"))


# -------------------------
# Output
# -------------------------

def test_input_document_is_not_mutated():
    document = make_metadata(make_approve(paramsLabel=["Who", "How much"]), make_transfer())
    original = copy.deepcopy(document)
    create_metadata(document)
    assert document == original


def test_validation_is_deterministic_and_idempotent():
    document = make_metadata(make_approve(), make_transfer())
    first = create_metadata(document)
    assert create_metadata(document) == first
    assert create_metadata(first) == first


def test_unknown_envelope_fields_are_dropped():
    validated = create_metadata(make_metadata(tracking="abc"))
    assert "tracking" not in validated


def test_is_validated_metadata():
    raw = make_metadata(make_approve())
    assert not is_validated_metadata(raw)
    assert is_validated_metadata(create_metadata(raw))
    assert not is_validated_metadata({"url": "x"})


# -------------------------
# Result form
# -------------------------

def test_validate_success():
    result = validate(make_metadata())
    assert result.is_valid
    assert result.errors == []
    assert result.data["actions"][0]["label"] == "Tip"


def test_validate_failure():
    result = validate(make_metadata(make_approve(amount=0.1)))
    assert not result.is_valid
    assert result.data is None
    assert result.error.code == "MUTABILITY_MISMATCH"
    assert result.error.path == "actions[0].amount"
    assert result.to_dict()["errors"][0]["level"] == "error"


def test_validate_collects_warnings():
    deposit_abi = [{"type": "function", "name": "deposit", "inputs": [], "stateMutability": "payable"}]
    action = make_approve(abi=deposit_abi, functionName="deposit", params=[])
    result = validate(make_metadata(action))
    assert result.is_valid
    assert [w.code for w in result.warnings] == ["MUTABILITY_MISMATCH"]

    strict = validate(make_metadata(action), config=ValidatorConfig(strict_payable_amount=True))
    assert not strict.is_valid


def make_flow_document(node: dict) -> dict:
    flow = {"type": "flow", "label": "Steps", "initialActionId": node["id"], "actions": [node]}
    return make_metadata(flow)


@pytest.mark.parametrize(
    "document",
    [
        make_flow_document({"id": "A", "type": "completion", "message": "Done", "status": ["success"]}),
        make_flow_document({"id": "A", "type": ["http"], "label": "Notify", "endpoint": "https://api.example.com"}),
        make_flow_document({
            "id": "A", "type": "transfer", "label": "Pay", "to": RECIPIENT, "amount": 1,
            "chains": {"source": "fuji"},
            "nextActions": [{"actionId": "A", "conditions": [{"field": "x", "operator": {"x": 1}, "value": 1}]}],
        }),
        make_metadata({"type": "http", "label": "Subscribe", "endpoint": "https://api.example.com", "method": ["POST"]}),
        make_metadata(make_transfer(amount=float("nan"))),
    ],
)
def test_validate_reports_malformed_values(document):
    result = validate(document)
    assert not result.is_valid
    assert result.error.code
