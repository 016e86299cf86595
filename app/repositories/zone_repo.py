from app.models.zone import Zone
from app.repositories.node_repo import NodeRepository


class ZoneRepository(NodeRepository[Zone]):
    model = Zone
    parent_field = "warehouse_id"
    order_field = "name"
