from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class AdjustmentCreate(BaseModel):
    product_id: int
    branch_id: Optional[int] = None
    adjustment_type: Literal["add", "remove", "set"] = "add"
    quantity: Union[int, str]
    notes: Optional[str] = Field(default=None, max_length=500)


class StrategyAttempt(BaseModel):
    name: str
    ok: bool
    error: Optional[str] = None


class AdjustmentResult(BaseModel):
    strategy: str
    quantity_change: int
    transaction_type: str
    quantity_before: Optional[int] = None
    quantity_after: Optional[int] = None
    attempts: list[StrategyAttempt] = Field(default_factory=list)
    inventory: dict


class TransferCreate(BaseModel):
    product_id: int
    from_branch_id: Optional[int] = None
    to_branch_id: Optional[int] = None
    quantity: int
    notes: Optional[str] = Field(default=None, max_length=500)


class TransferResult(BaseModel):
    strategy: str
    quantity: int
    notes: Optional[str] = None
    inventory: dict
