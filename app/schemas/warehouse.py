from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WarehouseCreate(BaseModel):
    name: str = Field(..., max_length=255)
    code: str = Field(..., max_length=64)
    address: str = Field("", max_length=512)
    storage_capacity: int = Field(0, ge=0)
    operational_hours: int = Field(0, ge=0)
    default_gst_state: str = Field("", max_length=64)


class WarehouseUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=512)
    storage_capacity: Optional[int] = Field(None, ge=0)
    operational_hours: Optional[int] = Field(None, ge=0)
    default_gst_state: Optional[str] = Field(None, max_length=64)


class WarehouseSummary(BaseModel):
    id: str
    code: str
    name: str
    address: str

    model_config = ConfigDict(from_attributes=True)


class WarehouseRead(WarehouseSummary):
    storage_capacity: int
    operational_hours: int
    default_gst_state: str
    total_zones: int
    total_racks: int
    total_shelves: int
    total_products: int
    name_version: int
    location_version: int
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str


class WarehouseCreated(BaseModel):
    success: bool = True
    warehouse: WarehouseSummary


class WarehouseList(BaseModel):
    warehouses: List[WarehouseRead]
