from dataclasses import dataclass
from typing import Optional

ASC = "asc"
DESC = "desc"


@dataclass
class SortState:
    """Column sort that cycles none -> asc -> desc -> none on the same column."""

    column: Optional[str] = None
    direction: str = ASC

    def toggle(self, column: str) -> "SortState":
        if self.column == column:
            if self.direction == ASC:
                self.direction = DESC
            else:
                self.column = None
                self.direction = ASC
        else:
            self.column = column
            self.direction = ASC
        return self

    @property
    def reverse(self) -> bool:
        return self.direction == DESC

    @classmethod
    def from_query(cls, column: Optional[str], direction: Optional[str]) -> "SortState":
        column = (column or "").strip() or None
        direction = (direction or ASC).strip().lower()
        if direction not in (ASC, DESC):
            direction = ASC
        return cls(column=column, direction=direction)


@dataclass
class StockFilters:
    status: str = "all"
    branch: str = "all"

    @property
    def active_count(self) -> int:
        return sum(1 for value in (self.status, self.branch) if value != "all")

    @property
    def has_active(self) -> bool:
        return self.active_count > 0

    def clear(self) -> None:
        self.status = "all"
        self.branch = "all"
