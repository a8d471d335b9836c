"""Device-link namespaces scanned for channel members"""

from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from typing import Iterable, List, Optional
import logging
import os
import re

from .models import CompositeIdentifier, DeviceLink

BY_PATH_DIR = "/dev/disk/by-path"
BY_ID_DIR = "/dev/disk/by-id"

# by-path names are dash separated; field 7 holds the slot
SLOT_FIELD = 6
PARTITION_SUFFIX = re.compile(r"-part\d+$")


class DeviceNamespace(ABC):
    """Abstract source of device-link names

    Subclasses only provide the raw listing; matching and slot extraction
    are shared so every namespace behaves the same way.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def list_names(self) -> List[str]:
        """Return all entry names in the namespace

        Returns:
            List[str]: Entry names (not full paths)
        """
        pass

    def links_for_port(self, bus: str, port: str) -> List[DeviceLink]:
        """Find whole-disk links attached to a bus/host port pair

        Args:
            bus: Bus identifier as it appears in the by-path name
            port: Host port identifier

        Returns:
            List[DeviceLink]: Matches sorted by raw slot
        """
        pattern = f"*:{bus}:*:{port}*"
        links = []

        for name in self.list_names():
            if not fnmatchcase(name, pattern) or "part" in name:
                continue

            link = self._parse_path_name(name)
            if link:
                links.append(link)

        self.logger.debug(f"Bus {bus}, Port {port}: {len(links)} links match {pattern}")
        return self._sort(links)

    def links_for_switch_port(self, switch_port: int, label_prefix: str = "") -> List[DeviceLink]:
        """Find whole-disk links behind a SAS switch port

        Args:
            switch_port: Switch port number encoded in the link name
            label_prefix: Prefix every matching link name starts with

        Returns:
            List[DeviceLink]: Matches sorted by enclosure bay
        """
        links = []

        for name in self.list_names():
            if not name.startswith(label_prefix) or PARTITION_SUFFIX.search(name):
                continue

            ident = CompositeIdentifier.parse(name[len(label_prefix):])
            if not ident.decorated or ident.switch_port != switch_port:
                continue

            links.append(DeviceLink(name=name, link=name, raw_slot=int(ident.bay), uuid=ident.uuid))

        self.logger.debug(f"Switch port {switch_port}: {len(links)} links")
        return self._sort(links)

    def _parse_path_name(self, name: str) -> Optional[DeviceLink]:
        fields = name.split("-")
        if len(fields) <= SLOT_FIELD:
            self.logger.debug(f"Skipping {name}: no slot field")
            return None

        try:
            raw_slot = int(fields[SLOT_FIELD])
        except ValueError:
            self.logger.debug(f"Skipping {name}: slot field '{fields[SLOT_FIELD]}' is not a number")
            return None

        return DeviceLink(name=name, link="-".join(fields[:SLOT_FIELD]), raw_slot=raw_slot)

    @staticmethod
    def _sort(links: List[DeviceLink]) -> List[DeviceLink]:
        return sorted(links, key=lambda l: (l.raw_slot, l.name))


class DirectoryNamespace(DeviceNamespace):
    """Namespace backed by a directory such as /dev/disk/by-path"""

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.path = path

    def list_names(self) -> List[str]:
        try:
            return sorted(os.listdir(self.path))
        except FileNotFoundError:
            self.logger.warning(f"Device directory {self.path} does not exist")
            return []

    def __repr__(self) -> str:
        return f"DirectoryNamespace({self.path!r})"


class StaticNamespace(DeviceNamespace):
    """Namespace holding a fixed list of names, e.g. a saved listing"""

    def __init__(self, names: Iterable[str], logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.names = list(names)

    @classmethod
    def from_file(cls, path: str, logger: Optional[logging.Logger] = None) -> "StaticNamespace":
        """Read one entry name per line, as printed by 'ls -1'

        Leading directories are stripped; 'ls -l' style lines are not understood.
        """
        with open(path, 'r') as f:
            names = [os.path.basename(line.strip()) for line in f if line.strip()]
        return cls(names, logger=logger)

    def list_names(self) -> List[str]:
        return list(self.names)
