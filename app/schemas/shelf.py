from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShelfCoordinates(BaseModel):
    aisle: str = ""
    bay: int = Field(0, ge=0)
    level: int = Field(0, ge=0)


class ShelfCreate(BaseModel):
    rack_id: str
    zone_id: Optional[str] = None
    warehouse_id: Optional[str] = None
    # имена предков клиента игнорируются: берём их из родителя
    rack_name: Optional[str] = None
    zone_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    name: str = Field(..., max_length=255)
    code: Optional[str] = Field(None, max_length=64)
    position: Optional[int] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    coordinates: Optional[ShelfCoordinates] = None


class ShelfUpdate(BaseModel):
    name: str = Field(..., max_length=255)
    code: Optional[str] = Field(None, max_length=64)
    position: Optional[int] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    coordinates: Optional[ShelfCoordinates] = None


class ShelfMove(BaseModel):
    # зона и склад обязательны: сверяем, что целевой стеллаж действительно там
    target_rack_id: str = Field(..., min_length=1)
    target_zone_id: str = Field(..., min_length=1)
    target_warehouse_id: str = Field(..., min_length=1)
    target_position: Optional[int] = Field(None, ge=0)


class ShelfSummary(BaseModel):
    id: str
    name: str
    position: int

    model_config = ConfigDict(from_attributes=True)


class ShelfRead(ShelfSummary):
    code: str
    capacity: Optional[int] = None
    coordinates: Optional[dict] = None
    rack_id: str
    rack_name: str
    zone_id: str
    zone_name: str
    warehouse_id: str
    warehouse_name: str
    path: str
    total_products: int
    current_occupancy: int
    name_version: int
    location_version: int
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str


class ShelfCreated(BaseModel):
    success: bool = True
    shelf: ShelfSummary


class ShelfList(BaseModel):
    shelves: List[ShelfRead]
