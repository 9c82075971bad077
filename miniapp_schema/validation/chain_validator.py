from typing import Any, Optional

from miniapp_schema.ir.errors import InvalidChainError, join_path
from miniapp_schema.validation.context import ValidationContext, ensure_context


def is_valid_chain(chain: Any, context: Optional[ValidationContext] = None) -> bool:
    context = ensure_context(context)
    return isinstance(chain, str) and chain in context.config.valid_chains


def validate_chain_context(
    chains: Any,
    context: Optional[ValidationContext] = None,
    path: Optional[str] = "chains",
) -> None:
    context = ensure_context(context)
    valid = ", ".join(context.config.valid_chains)

    if not isinstance(chains, dict):
        raise InvalidChainError("Chains configuration is required", path=path)

    source = chains.get("source")
    if not is_valid_chain(source, context):
        raise InvalidChainError(
            f"Invalid source chain: {source}. Valid chains are: {valid}",
            path=join_path(path, "source"),
        )

    destination = chains.get("destination")
    if destination is not None and not is_valid_chain(destination, context):
        raise InvalidChainError(
            f"Invalid destination chain: {destination}. Valid chains are: {valid}",
            path=join_path(path, "destination"),
        )
