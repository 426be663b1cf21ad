"""Archive request and result models.

Field names follow the JSON the stock-take frontend posts (camelCase);
Python attributes are snake_case.
"""

from dataclasses import dataclass
from typing import Iterator, List, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, StrictFloat, StrictInt

# Quantities keep the numeric form they were sent in (int stays int);
# booleans and numeric strings are rejected
Quantity = Union[StrictInt, StrictFloat]


class ReconciliationRecord(BaseModel):
    """One counted inventory item.

    ``difference`` is passed through as given; it is not re-derived from
    the quantities.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    item_id: str = Field(..., alias="itemId", min_length=1)
    system_qty: Quantity = Field(..., alias="systemQty")
    initial_physical_qty: Quantity = Field(..., alias="initialPhysicalQty")
    final_physical_qty: Quantity = Field(..., alias="finalPhysicalQty")
    difference: Quantity
    status: str
    recount_history: List[Quantity] = Field(default_factory=list, alias="recountHistory")


class ArchiveBatch(RootModel[List[ReconciliationRecord]]):
    """Ordered, non-empty list of records submitted in one request."""
    root: List[ReconciliationRecord] = Field(..., min_length=1)

    @property
    def records(self) -> List[ReconciliationRecord]:
        return self.root

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self) -> Iterator[ReconciliationRecord]:
        return iter(self.root)


@dataclass(frozen=True)
class ArtifactName:
    """Generated name of an uploaded archive file."""
    stem: str
    extension: str = ".csv"

    @property
    def file_name(self) -> str:
        return f"{self.stem}{self.extension}"

    def __str__(self) -> str:
        return self.file_name


@dataclass
class ArchiveResult:
    """Outcome of a successful archive invocation."""
    artifact: ArtifactName
    site_id: str
    destination: str
    row_count: int

    @property
    def message(self) -> str:
        return f"Successfully archived {self.artifact.file_name} to {self.destination}."
