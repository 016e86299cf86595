from .warehouse import Warehouse
from .zone import Zone
from .rack import Rack
from .shelf import Shelf
from .placement import Placement
from .upc import UPC
from .movement import Movement
from .entity_log import EntityLog
from .grn import GRN
from .business_member import BusinessMember
from .enums import LogType, EntityType, PutAwayState, MovementType, GRNStatus, MemberRole
