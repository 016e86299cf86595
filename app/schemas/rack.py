from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RackCreate(BaseModel):
    zone_id: str
    warehouse_id: Optional[str] = None
    name: str = Field(..., max_length=255)
    code: str = Field(..., max_length=64)
    # None или 0 -> в конец
    position: Optional[int] = Field(None, ge=0)


class RackUpdate(BaseModel):
    name: str = Field(..., max_length=255)
    position: Optional[int] = Field(None, ge=0)


class RackMove(BaseModel):
    target_zone_id: str
    target_warehouse_id: Optional[str] = None
    target_position: Optional[int] = Field(None, ge=0)


class RackSummary(BaseModel):
    id: str
    code: str
    name: str
    position: int

    model_config = ConfigDict(from_attributes=True)


class RackRead(RackSummary):
    zone_id: str
    zone_name: str
    warehouse_id: str
    warehouse_name: str
    total_shelves: int
    total_products: int
    name_version: int
    location_version: int
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str


class RackCreated(BaseModel):
    success: bool = True
    rack: RackSummary


class RackList(BaseModel):
    racks: List[RackRead]
