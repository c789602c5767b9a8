"""
Pydantic models for parsed invoices, canonical ingredients and inventory sync results.
"""
from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

Unit = Literal["kg", "g", "L", "ml", "each", "pkt", "sachet", "lb", "oz"]
IngredientType = Literal["fermentable", "hop", "yeast", "misc"]


class RawLineItem(BaseModel):
    """A line item as read off the invoice, before classification."""
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: float = Field(default=1.0, gt=0)
    unit: Unit = "each"
    price: float = Field(default=0.0, ge=0, description="Line total")
    raw_line: str = ""


class InvoiceDocument(BaseModel):
    """Result of parsing one invoice's text."""
    model_config = ConfigDict(frozen=True)

    invoice_number: Optional[str] = None
    date: Optional[str] = None
    total: Optional[float] = None
    items: tuple[RawLineItem, ...] = ()
    raw_text: str = ""
    parser: Optional[str] = Field(
        default=None,
        description="Name of the strategy that produced the items, None if nothing was found",
    )


class _IngredientBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    sub_type: str
    amount: float = Field(ge=0)
    unit: str
    cost: float = Field(ge=0, description="Cost per canonical unit")
    supplier: str = ""
    origin: str = "Unknown"
    notes: str = ""


class Fermentable(_IngredientBase):
    type: Literal["fermentable"] = "fermentable"
    color: int = 2
    unit: Literal["kg"] = "kg"


class Hop(_IngredientBase):
    type: Literal["hop"] = "hop"
    form: str = "Pellet"
    alpha: float = 5.0
    unit: Literal["g"] = "g"


class Yeast(_IngredientBase):
    type: Literal["yeast"] = "yeast"
    form: str = "Dry"
    laboratory: str = "Unknown"
    product_id: str = ""
    unit: Literal["pkg", "g"] = "pkg"


class Misc(_IngredientBase):
    type: Literal["misc"] = "misc"
    use: str = "Boil"
    unit: Literal["g"] = "g"


CanonicalIngredient = Annotated[
    Union[Fermentable, Hop, Yeast, Misc],
    Field(discriminator="type"),
]


class CatalogEntry(BaseModel):
    """Read-only snapshot of an existing inventory record."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    current_amount: float = 0.0
    unit: str = "units"


class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    found: bool
    catalog_entry: Optional[CatalogEntry] = None
    confidence: Optional[Literal["high", "medium"]] = None
    suggestions: tuple[CatalogEntry, ...] = ()


class SyncResult(BaseModel):
    """Outcome of one inventory adjustment."""
    model_config = ConfigDict(frozen=True)

    name: str
    success: bool
    action: Literal["adjusted", "not_found", "error"]
    id: Optional[str] = None
    current_amount: Optional[float] = None
    adjusted_by: Optional[float] = None
    new_amount: Optional[float] = None
    unit: Optional[str] = None
    error: Optional[str] = None


class CategorySyncReport(BaseModel):
    """All sync results for one ingredient category."""
    model_config = ConfigDict(frozen=True)

    category: IngredientType
    results: tuple[SyncResult, ...] = ()
    error: Optional[str] = Field(
        default=None,
        description="Set when the whole category failed, e.g. the snapshot could not be fetched",
    )

    @computed_field
    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @computed_field
    @property
    def not_found(self) -> int:
        return sum(1 for r in self.results if r.action == "not_found")

    @computed_field
    @property
    def errors(self) -> int:
        failed = sum(1 for r in self.results if r.action == "error")
        return failed + (1 if self.error else 0)


class ProcessedInvoice(BaseModel):
    """Result for a single processed invoice PDF."""
    source_file: str
    invoice: InvoiceDocument = Field(default_factory=InvoiceDocument)
    ingredients: list[CanonicalIngredient] = Field(default_factory=list)
    raw_metadata: dict = Field(default_factory=dict)
