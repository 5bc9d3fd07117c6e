from typing import Optional

from pydantic import BaseModel, ConfigDict


class BranchBase(BaseModel):
    name: str
    name_ar: Optional[str] = None
    code: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    is_main_branch: bool = False


class BranchSave(BranchBase):
    pass


class BranchRead(BranchBase):
    id: int
    store_id: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
