import dataclasses
import uuid
from typing import Optional, Tuple


def new_line_id() -> str:
    return uuid.uuid4().hex


@dataclasses.dataclass
class InventoryItem:
    """A merchant's master ingredient record."""

    id: str
    name: str
    unit: str  # primary unit
    aliases: Tuple[str, ...] = ()
    supported_units: Tuple[str, ...] = ()
    is_active: bool = True


@dataclasses.dataclass
class IngredientLine:
    """One ingredient entry in a recipe, in recipe order."""

    name: str
    quantity: float = 0.0
    unit: str = ""
    original_unit: Optional[str] = None
    unit_unclear: bool = False
    inventory_ref: Optional[str] = None
    is_new: bool = True
    confidence: str = "low"  # 'high', 'medium', 'low'
    line_id: str = dataclasses.field(default_factory=new_line_id)

    @property
    def is_matched(self) -> bool:
        return self.inventory_ref is not None


@dataclasses.dataclass
class InventoryMatch:
    item: InventoryItem
    score: float
    confidence: Optional[str] = None  # only set for automatic matches


@dataclasses.dataclass
class ParsedLine:
    """Unvalidated ingredient data handed over by an import source."""

    name: str
    quantity: Optional[float]
    unit: Optional[str]
