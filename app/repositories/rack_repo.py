from app.models.rack import Rack
from app.repositories.node_repo import NodeRepository


class RackRepository(NodeRepository[Rack]):
    model = Rack
    parent_field = "zone_id"
    order_field = "position"
