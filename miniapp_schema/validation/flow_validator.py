"""
Flow Validator - validates multi-step flows: a directed graph of action,
decision and completion nodes.

Catches issues like:
- Missing or duplicate node ids
- Initial node that does not exist
- Edges and decision options pointing at unknown nodes
- Completion nodes with outgoing edges
- Malformed edge conditions
- Nodes that cannot be reached from the initial node

Cycles are allowed: the traversal only marks each node once.
"""

import copy
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set

from miniapp_schema.ir.errors import (
    GraphReferenceError,
    MiniAppValidationError,
    StructuralError,
    UnknownActionType,
    UnreachableNodeError,
    join_path,
)
from miniapp_schema.validation.blockchain_action_validator import BlockchainActionValidator
from miniapp_schema.validation.context import ValidationContext, ensure_context
from miniapp_schema.validation.dynamic_action_validator import DynamicActionValidator
from miniapp_schema.validation.http_action_validator import HttpActionValidator
from miniapp_schema.validation.parameter_validator import is_non_empty_str
from miniapp_schema.validation.transfer_action_validator import TransferActionValidator

logger = logging.getLogger(__name__)

CONDITION_OPERATORS = {"eq", "ne", "gt", "lt", "gte", "lte", "contains"}
COMPLETION_STATUSES = {"success", "error", "info"}


class FlowValidator:
    """
    Validates a flow and every node inside it.

    Usage:
        validated = FlowValidator(context).validate(flow, path="actions[0]")
    """

    def __init__(self, context: Optional[ValidationContext] = None):
        self.context = ensure_context(context)
        self.action_validators = {
            "blockchain": BlockchainActionValidator(self.context),
            "transfer": TransferActionValidator(self.context, allow_placeholders=True),
            "http": HttpActionValidator(self.context),
            "dynamic": DynamicActionValidator(self.context),
        }

    def validate(self, flow: Any, path: Optional[str] = None) -> Dict[str, Any]:
        self._check_envelope(flow, path)

        nodes = flow["actions"]
        nodes_path = join_path(path, "actions")
        node_ids = self._check_node_ids(nodes, nodes_path)

        if flow["initialActionId"] not in node_ids:
            raise GraphReferenceError(
                f"Initial action '{flow['initialActionId']}' not found",
                path=join_path(path, "initialActionId"),
            )

        validated_nodes = [
            self._validate_node(node, node_ids, f"{nodes_path}[{index}]")
            for index, node in enumerate(nodes)
        ]

        self._check_reachability(flow, nodes_path)

        logger.debug("Validated flow '%s' with %d nodes", flow["label"], len(nodes))

        validated = copy.deepcopy(flow)
        validated["actions"] = validated_nodes
        return validated

    # ---- envelope ----

    def _check_envelope(self, flow: Any, path: Optional[str]) -> None:
        if not isinstance(flow, dict):
            raise StructuralError("Flow must be an object", path=path)
        if not is_non_empty_str(flow.get("label")):
            raise StructuralError("Flow must have a label", path=join_path(path, "label"))
        if not is_non_empty_str(flow.get("initialActionId")):
            raise StructuralError("Flow must have an initialActionId", path=join_path(path, "initialActionId"))

        nodes = flow.get("actions")
        if not isinstance(nodes, list) or not nodes:
            raise StructuralError("Flow must have at least one action", path=join_path(path, "actions"))

    def _check_node_ids(self, nodes: List[Any], path: Optional[str]) -> Set[str]:
        seen_ids: Dict[str, int] = defaultdict(int)
        for index, node in enumerate(nodes):
            node_path = f"{path}[{index}]"
            if not isinstance(node, dict):
                raise StructuralError("Flow node must be an object", path=node_path)
            if not is_non_empty_str(node.get("id")):
                raise StructuralError("Action must have an id", path=join_path(node_path, "id"))
            seen_ids[node["id"]] += 1

        for node_id, count in seen_ids.items():
            if count > 1:
                raise StructuralError(f"Duplicate action id '{node_id}' appears {count} times", path=path)
        return set(seen_ids)

    # ---- nodes ----

    def _validate_node(self, node: Dict[str, Any], node_ids: Set[str], path: str) -> Dict[str, Any]:
        kind = node.get("type")

        if kind == "decision":
            self._check_decision(node, node_ids, path)
            return copy.deepcopy(node)
        if kind == "completion":
            self._check_completion(node, path)
            return copy.deepcopy(node)

        validator = self.action_validators.get(kind) if isinstance(kind, str) else None
        if validator is None:
            raise UnknownActionType(
                f"Unknown action type '{kind}' for action '{node['id']}'", path=join_path(path, "type")
            )

        try:
            validated = validator.validate(node)
        except MiniAppValidationError as exc:
            raise exc.with_context(path=path, prefix=f"Action '{node['id']}'") from exc

        self._check_next_actions(node, node_ids, path)
        return validated

    def _check_decision(self, node: Dict[str, Any], node_ids: Set[str], path: str) -> None:
        node_id = node["id"]
        if not is_non_empty_str(node.get("title")):
            raise StructuralError(
                f"Decision action '{node_id}' must have a title", path=join_path(path, "title")
            )

        options = node.get("options")
        options_path = join_path(path, "options")
        if not isinstance(options, list) or not options:
            raise StructuralError(f"Decision action '{node_id}' must have options", path=options_path)

        for index, option in enumerate(options):
            option_path = f"{options_path}[{index}]"
            if not isinstance(option, dict) or not is_non_empty_str(option.get("label")):
                raise StructuralError(
                    f"Option in decision action '{node_id}' must have a label",
                    path=join_path(option_path, "label"),
                )
            label = option["label"]
            if "value" not in option:
                raise StructuralError(
                    f"Option '{label}' in decision action '{node_id}' must have a value",
                    path=join_path(option_path, "value"),
                )
            target = option.get("nextActionId")
            if not is_non_empty_str(target):
                raise StructuralError(
                    f"Option '{label}' in decision action '{node_id}' must have a nextActionId",
                    path=join_path(option_path, "nextActionId"),
                )
            if target not in node_ids:
                raise GraphReferenceError(
                    f"Next action '{target}' from option '{label}' in decision action "
                    f"'{node_id}' not found",
                    path=join_path(option_path, "nextActionId"),
                )

    def _check_completion(self, node: Dict[str, Any], path: str) -> None:
        node_id = node["id"]
        if not is_non_empty_str(node.get("message")):
            raise StructuralError(
                f"Completion action '{node_id}' must have a message", path=join_path(path, "message")
            )
        status = node.get("status")
        if not isinstance(status, str) or status not in COMPLETION_STATUSES:
            raise StructuralError(
                f"Completion action '{node_id}' must have a valid status (success, error, or info)",
                path=join_path(path, "status"),
            )
        if node.get("nextActions"):
            raise StructuralError(
                f"Completion action '{node_id}' should not have nextActions",
                path=join_path(path, "nextActions"),
            )

    # ---- edges ----

    def _check_next_actions(self, node: Dict[str, Any], node_ids: Set[str], path: str) -> None:
        node_id = node["id"]
        edges = node.get("nextActions")
        if edges is None:
            return

        edges_path = join_path(path, "nextActions")
        if not isinstance(edges, list):
            raise StructuralError(f"nextActions of action '{node_id}' must be a list", path=edges_path)

        for index, edge in enumerate(edges):
            edge_path = f"{edges_path}[{index}]"
            if not isinstance(edge, dict) or not is_non_empty_str(edge.get("actionId")):
                raise StructuralError(
                    f"NextAction in action '{node_id}' must have an actionId",
                    path=join_path(edge_path, "actionId"),
                )
            target = edge["actionId"]
            if target not in node_ids:
                raise GraphReferenceError(
                    f"Next action '{target}' from action '{node_id}' not found",
                    path=join_path(edge_path, "actionId"),
                )
            self._check_conditions(edge.get("conditions"), node_id, target, join_path(edge_path, "conditions"))

    def _check_conditions(self, conditions: Any, node_id: str, target: str, path: str) -> None:
        if conditions is None:
            return
        if not isinstance(conditions, list):
            raise StructuralError(
                f"Conditions on nextAction '{target}' from action '{node_id}' must be a list", path=path
            )

        for index, condition in enumerate(conditions):
            condition_path = f"{path}[{index}]"
            where = f"nextAction '{target}' from action '{node_id}'"
            if not isinstance(condition, dict) or not is_non_empty_str(condition.get("field")):
                raise StructuralError(
                    f"Condition in {where} must have a field", path=join_path(condition_path, "field")
                )
            operator = condition.get("operator")
            if not isinstance(operator, str) or operator not in CONDITION_OPERATORS:
                raise StructuralError(
                    f"Condition in {where} has invalid operator: {operator}",
                    path=join_path(condition_path, "operator"),
                )
            if "value" not in condition:
                raise StructuralError(
                    f"Condition in {where} must have a value", path=join_path(condition_path, "value")
                )

    # ---- graph ----

    def _check_reachability(self, flow: Dict[str, Any], path: Optional[str]) -> None:
        nodes_by_id = {node["id"]: node for node in flow["actions"]}
        reachable: Set[str] = set()
        to_visit = [flow["initialActionId"]]

        while to_visit:
            node_id = to_visit.pop()
            if node_id in reachable:
                continue
            reachable.add(node_id)
            to_visit.extend(
                target for target in successors(nodes_by_id[node_id]) if target not in reachable
            )

        unreachable = [node["id"] for node in flow["actions"] if node["id"] not in reachable]
        if unreachable:
            raise UnreachableNodeError(
                f"The following actions are unreachable: {', '.join(unreachable)}",
                path=path,
                node_ids=unreachable,
            )


def successors(node: Dict[str, Any]) -> List[str]:
    """Outgoing node ids: decision options for decisions, nextActions otherwise."""
    if node.get("type") == "decision":
        return [option["nextActionId"] for option in node.get("options") or []]
    return [edge["actionId"] for edge in node.get("nextActions") or []]


def is_action_flow(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and obj.get("type") == "flow"
        and isinstance(obj.get("label"), str)
        and isinstance(obj.get("initialActionId"), str)
        and isinstance(obj.get("actions"), list)
    )


def validate_flow(
    flow: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = None,
) -> Dict[str, Any]:
    """Convenience function to validate one flow."""
    return FlowValidator(context).validate(flow, path=path)
