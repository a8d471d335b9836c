"""Data models for disk channel naming"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

SWITCH_ID_PATTERN = re.compile(r"^(?P<uuid>.+)-switch-port:(?P<port>\d+)-slot:(?P<slot>\d+)$")


class TopologyMode(str, Enum):
    """How disks are attached to the host"""

    DIRECT = "direct"
    SWITCH = "switch"


@dataclass(frozen=True)
class AttachmentPoint:
    """A physical attachment point that owns one channel label"""

    channel: str                         # Channel label (e.g., A)
    bus: Optional[str] = None            # Bus identifier (direct mode)
    port: Optional[str] = None           # Host port identifier (direct mode)
    switch_port: Optional[int] = None    # SAS switch port (switch mode)

    @property
    def mode(self) -> TopologyMode:
        if self.switch_port is not None:
            return TopologyMode.SWITCH
        return TopologyMode.DIRECT

    @property
    def description(self) -> str:
        """Human-readable location used in the generated file"""
        if self.mode is TopologyMode.SWITCH:
            return f"Switch Port {self.switch_port}"
        return f"Bus {self.bus}, Port {self.port}"

    def to_dict(self) -> dict:
        """Convert attachment point to dictionary representation"""
        return {
            "channel": self.channel,
            "bus": self.bus,
            "port": self.port,
            "switch_port": self.switch_port,
        }


@dataclass(frozen=True)
class DeviceLink:
    """One entry found in a device-link namespace"""

    name: str                        # Raw directory entry name
    link: str                        # Name written to the naming file
    raw_slot: int                    # Kernel/OS slot or enclosure bay
    uuid: str = ""                   # Disk UUID (switch mode only)


@dataclass(frozen=True)
class NamingEntry:
    """A single <channel><rank> to device-link mapping"""

    channel: str
    rank: int
    link: str

    @property
    def alias(self) -> str:
        return f"{self.channel}{self.rank}"

    @property
    def line(self) -> str:
        """Line as written to the naming file"""
        return f"{self.alias}\t{self.link}"


@dataclass
class ChannelGroup:
    """Scan result for one attachment point"""

    point: AttachmentPoint
    links: List[DeviceLink] = field(default_factory=list)
    entries: List[NamingEntry] = field(default_factory=list)

    @property
    def raw_slots(self) -> List[int]:
        """Unique raw slots seen on this channel, numerically sorted"""
        return sorted({link.raw_slot for link in self.links})

    @property
    def sorted_entries(self) -> List[NamingEntry]:
        return sorted(self.entries, key=lambda e: e.rank)


@dataclass(frozen=True)
class CompositeIdentifier:
    """Identifier printed by the SAS switch callout"""

    uuid: str
    switch_port: Optional[int] = None
    bay: Optional[str] = None

    @property
    def decorated(self) -> bool:
        return self.switch_port is not None and self.bay is not None

    def __str__(self) -> str:
        if self.decorated:
            return f"{self.uuid}-switch-port:{self.switch_port}-slot:{self.bay}"
        return self.uuid

    @classmethod
    def parse(cls, text: str) -> "CompositeIdentifier":
        """Split a decorated identifier back into its parts

        A string without the switch decoration is returned as a bare UUID.
        """
        match = SWITCH_ID_PATTERN.match(text)
        if not match:
            return cls(uuid=text)
        return cls(
            uuid=match.group("uuid"),
            switch_port=int(match.group("port")),
            bay=match.group("slot")
        )
