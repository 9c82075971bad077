"""
Read-only models for the contract interface description (ABI).

The validators only ever look a function up by name, read its ordered
inputs and resolve its mutability class. Parsed models are built from the
caller's list; the caller's data is never modified.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from miniapp_schema.ir.errors import StructuralError

Mutability = Literal["pure", "view", "nonpayable", "payable"]
MUTABILITY_CLASSES = ("pure", "view", "nonpayable", "payable")


class AbiParameter(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    type: str
    internal_type: Optional[str] = Field(default=None, alias="internalType")
    components: Optional[List["AbiParameter"]] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


AbiParameter.model_rebuild()


class AbiItem(BaseModel):
    """One ABI entry. Entries without an explicit type are functions."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = "function"
    name: Optional[str] = None
    inputs: List[AbiParameter] = Field(default_factory=list)
    outputs: List[AbiParameter] = Field(default_factory=list)
    state_mutability: Optional[Mutability] = Field(default=None, alias="stateMutability")

    # pre-0.4.16 compilers emitted these flags instead of stateMutability
    payable: Optional[bool] = None
    constant: Optional[bool] = None

    @property
    def is_function(self) -> bool:
        return self.type == "function"

    @property
    def mutability(self) -> str:
        if self.state_mutability:
            return self.state_mutability
        if self.payable:
            return "payable"
        if self.constant:
            return "view"
        return "nonpayable"

    def input_names(self) -> List[str]:
        return [p.name or "" for p in self.inputs]

    def input_dicts(self) -> List[dict]:
        return [p.to_dict() for p in self.inputs]


def parse_abi(abi: Any, path: str = "abi") -> List[AbiItem]:
    if not isinstance(abi, list) or not abi:
        raise StructuralError("Action must have a non-empty ABI list", path=path)

    items: List[AbiItem] = []
    for index, entry in enumerate(abi):
        if not isinstance(entry, dict):
            raise StructuralError(
                f"ABI entry at index {index} must be an object", path=f"{path}[{index}]"
            )
        try:
            items.append(AbiItem.model_validate(entry))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise StructuralError(
                f"Invalid ABI entry at index {index}: {location} {first.get('msg', '')}".strip(),
                path=f"{path}[{index}]",
            ) from exc
    return items


def find_function(items: List[AbiItem], function_name: str) -> Optional[AbiItem]:
    for item in items:
        if item.is_function and item.name == function_name:
            return item
    return None


def has_input_named(function: AbiItem, name: str) -> bool:
    return any(p.name == name for p in function.inputs)
