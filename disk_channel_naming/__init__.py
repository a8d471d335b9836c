"""
Disk Channel Naming

Gives stable <channel><rank> names (e.g. A3) to disks reached through
direct bus/port attachment or a SAS switch, and provides the uid callout
that encodes switch port and enclosure bay into a disk identifier.
"""

from .errors import ConfigError, NamingError, UUIDQueryError
from .mapper import TopologyMapper
from .models import CompositeIdentifier, NamingEntry, TopologyMode
from .resolver import IdentityResolver
from .slot_map import SlotMap

__version__ = "1.0.0"
__all__ = [
    "CompositeIdentifier", "ConfigError", "IdentityResolver", "NamingEntry",
    "NamingError", "SlotMap", "TopologyMapper", "TopologyMode", "UUIDQueryError"
]
