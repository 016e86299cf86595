from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.models.shelf import shelf_path


# --- placements ---

class PlacementRead(BaseModel):
    id: str
    product_id: str
    product_sku: str
    quantity: int
    coordinates: Optional[dict] = None
    location_code: Optional[str] = None
    warehouse_id: str
    warehouse_name: str
    zone_id: str
    zone_name: str
    rack_id: str
    rack_name: str
    shelf_id: str
    shelf_name: str
    last_movement_reason: Optional[str] = None
    last_movement_reference: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlacementList(BaseModel):
    placements: List[PlacementRead]


class ProductPlacementRead(PlacementRead):
    @computed_field
    @property
    def location_path(self) -> str:
        return shelf_path(self.zone_name, self.rack_name, self.shelf_name)


class ProductPlacementList(BaseModel):
    placements: List[ProductPlacementRead]


# --- UPC ---

class UPCRead(BaseModel):
    id: str
    product_id: str
    put_away: str
    warehouse_id: Optional[str] = None
    zone_id: Optional[str] = None
    rack_id: Optional[str] = None
    shelf_id: Optional[str] = None
    placement_id: Optional[str] = None
    store_id: Optional[str] = None
    order_id: Optional[str] = None
    grn_ref: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UPCList(BaseModel):
    upcs: List[UPCRead]


# --- movements ---

class MovementRead(BaseModel):
    id: str
    product_id: str
    product_sku: str
    type: str
    from_location: dict
    to_location: dict
    quantity: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    timestamp: datetime
    user_id: str
    user_name: str

    model_config = ConfigDict(from_attributes=True)


class MovementPage(BaseModel):
    movements: List[MovementRead]
    has_more: bool
    last_id: Optional[str] = None


# --- GRN ---

class GRNItem(BaseModel):
    sku: str = Field(..., min_length=1)
    product_name: str = ""
    received_qty: int = Field(0, ge=0)


class GRNCreate(BaseModel):
    grn_number: str = Field(..., max_length=64)
    items: List[GRNItem] = Field(..., min_length=1)


class GRNSummary(BaseModel):
    id: str
    grn_number: str
    status: str

    model_config = ConfigDict(from_attributes=True)


class GRNCreated(BaseModel):
    success: bool = True
    grn: GRNSummary


class GRNUpdate(BaseModel):
    # завершение GRN только через confirm-put-away, здесь допустима лишь отмена
    status: Optional[str] = None
    items: Optional[List[GRNItem]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=1024)


class GRNUpdated(BaseModel):
    success: bool = True
    grn_id: str
    updated_fields: List[str]


class GRNDeleted(BaseModel):
    success: bool = True
    grn_id: str
    deleted_grn_number: str


class PutAwayItemResult(BaseModel):
    sku: str
    product_name: str
    upcs_created: int


class ConfirmPutAwayResult(BaseModel):
    success: bool = True
    grn_id: str
    grn_number: str
    grn_status: str
    total_upcs_created: int
    items: List[PutAwayItemResult]


# --- put-away ---

class PutAwayRequest(BaseModel):
    upc_ids: List[str] = Field(..., min_length=1, max_length=500)
    warehouse_id: str = Field(..., min_length=1)
    zone_id: str = Field(..., min_length=1)
    rack_id: str = Field(..., min_length=1)
    shelf_id: str = Field(..., min_length=1)

    @field_validator("upc_ids")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        # порядок сохраняем, дубли выкидываем
        return list(dict.fromkeys(v))


class PutAwayResult(BaseModel):
    success: bool = True
    count: int
    message: str
