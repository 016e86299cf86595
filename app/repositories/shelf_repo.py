from app.models.shelf import Shelf
from app.repositories.node_repo import NodeRepository


class ShelfRepository(NodeRepository[Shelf]):
    model = Shelf
    parent_field = "rack_id"
    order_field = "position"
