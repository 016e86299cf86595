from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class LogRead(BaseModel):
    id: str
    entity_type: str
    entity_id: str
    type: str
    changes: Optional[dict] = None
    note: Optional[str] = None
    from_location: Optional[dict] = None
    to_location: Optional[dict] = None
    quantity: Optional[int] = None
    quantity_before: Optional[int] = None
    quantity_after: Optional[int] = None
    related_movement_id: Optional[str] = None
    timestamp: datetime
    user_id: str

    model_config = ConfigDict(from_attributes=True)


class LogList(BaseModel):
    logs: List[LogRead]
