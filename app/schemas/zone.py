from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ZoneCreate(BaseModel):
    warehouse_id: str
    name: str = Field(..., max_length=255)
    code: str = Field(..., max_length=64)
    description: str = Field("", max_length=1024)


class ZoneUpdate(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=1024)


class ZoneMove(BaseModel):
    target_warehouse_id: str


class ZoneSummary(BaseModel):
    id: str
    code: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class ZoneRead(ZoneSummary):
    description: str
    warehouse_id: str
    warehouse_name: str
    total_racks: int
    total_shelves: int
    total_products: int
    name_version: int
    location_version: int
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str


class ZoneCreated(BaseModel):
    success: bool = True
    zone: ZoneSummary


class ZoneList(BaseModel):
    zones: List[ZoneRead]
