"""Unique identifiers for disks behind a SAS switch

Used as a multipath uid callout. The disk UUID comes from scsi_id; when the
kernel device tree exposes the switch PHYs and the enclosure bay, the UUID
is decorated with the switch port and bay so disks sort by location.
"""

import logging
import os
import re
import subprocess
from typing import List, Optional, Sequence

from .errors import ConfigError, UUIDQueryError
from .models import CompositeIdentifier

SCSI_ID_COMMAND = ("/lib/udev/scsi_id", "--whitelisted", "--replace-whitespace")
DEFAULT_PHYS_PER_PORT = 4
# host<N> -> port -> expander -> phy container
DEFAULT_LEVELS = 3

HOST_SEGMENT = re.compile(r"^host\d+$")
PHY_ENTRY = re.compile(r"^phy-?(?:\d+:)*(\d+)$")


class IdentityResolver:
    """Derives the (optionally decorated) identifier of a block device"""

    def __init__(self, phys_per_port: int = DEFAULT_PHYS_PER_PORT, levels: int = DEFAULT_LEVELS,
                 sysfs_root: str = "/sys", dev_root: str = "/dev",
                 scsi_id_cmd: Sequence[str] = SCSI_ID_COMMAND,
                 logger: Optional[logging.Logger] = None):
        """Initialize the resolver

        Args:
            phys_per_port: Number of PHYs aggregated by one switch port
            levels: Path segments between host<N> and the PHY container
            sysfs_root: Mount point of sysfs
            dev_root: Directory holding device nodes
            scsi_id_cmd: scsi_id command without the --device argument
            logger: Logger instance

        Raises:
            ConfigError: If phys_per_port or levels is not positive
        """
        if phys_per_port < 1:
            raise ConfigError(f"PHYs per port must be a positive integer, got {phys_per_port}")
        if levels < 1:
            raise ConfigError(f"Levels to descend must be a positive integer, got {levels}")

        self.phys_per_port = phys_per_port
        self.levels = levels
        self.sysfs_root = sysfs_root
        self.dev_root = dev_root
        self.scsi_id_cmd = list(scsi_id_cmd)
        self.logger = logger or logging.getLogger(__name__)

    def query_uuid(self, device: str) -> str:
        """Ask scsi_id for the device UUID

        Raises:
            UUIDQueryError: If scsi_id fails or prints nothing
        """
        cmd = self.scsi_id_cmd + [f"--device={os.path.join(self.dev_root, device)}"]
        self.logger.debug(f"Executing command: {' '.join(cmd)}")

        try:
            output = subprocess.check_output(cmd, stderr=subprocess.DEVNULL, universal_newlines=True)
        except subprocess.CalledProcessError as e:
            raise UUIDQueryError(f"scsi_id failed for {device} with exit status {e.returncode}")
        except OSError as e:
            raise UUIDQueryError(f"Unable to run {cmd[0]}: {e}")

        lines = output.splitlines()
        uuid = lines[0].strip() if lines else ""
        if not uuid:
            raise UUIDQueryError(f"scsi_id returned no UUID for {device}")
        return uuid

    def device_path(self, device: str) -> str:
        """Canonical /sys/devices path of a block device"""
        return os.path.realpath(os.path.join(self.sysfs_root, "block", device))

    @staticmethod
    def find_host_segment(parts: List[str]) -> Optional[int]:
        """Index of the first host<N> segment, or None"""
        for i, part in enumerate(parts):
            if HOST_SEGMENT.match(part):
                return i
        return None

    def phy_container(self, parts: List[str], host_index: int) -> Optional[str]:
        """Directory reached by descending the configured levels below host<N>"""
        end = host_index + 1 + self.levels
        if end > len(parts):
            return None
        return os.sep.join(parts[:end])

    def switch_port(self, parts: List[str], host_index: int) -> Optional[int]:
        """Switch port derived from the lowest PHY in the PHY container"""
        container = self.phy_container(parts, host_index)
        if container is None:
            self.logger.debug("Device path too short to reach the PHY container")
            return None

        try:
            entries = os.listdir(container)
        except OSError as e:
            self.logger.debug(f"Unable to list {container}: {e}")
            return None

        phys = [int(m.group(1)) for m in map(PHY_ENTRY.match, entries) if m]
        if not phys:
            self.logger.debug(f"No PHY entries in {container}")
            return None

        return min(phys) // self.phys_per_port

    def bay_identifier(self, parts: List[str], start: int) -> Optional[str]:
        """Enclosure bay of the end device found at or after parts[start]"""
        for i in range(start, len(parts)):
            segment = parts[i]
            if not segment.startswith("end_device"):
                continue

            attr = os.path.join(os.sep.join(parts[:i + 1]), "sas_device", segment, "bay_identifier")
            try:
                with open(attr, 'r') as f:
                    bay = f.read().strip()
            except OSError as e:
                self.logger.debug(f"Unable to read {attr}: {e}")
                return None

            return bay or None

        self.logger.debug("No end_device segment in device path")
        return None

    def resolve(self, device: str) -> CompositeIdentifier:
        """Build the identifier for a block device

        Only the UUID query can fail; every later step falls back to the
        bare UUID when the topology information is missing.

        Args:
            device: Block device basename (e.g., sdb)

        Raises:
            UUIDQueryError: If no UUID can be obtained
        """
        device = os.path.basename(device)
        uuid = self.query_uuid(device)
        bare = CompositeIdentifier(uuid=uuid)

        path = self.device_path(device)
        parts = path.split(os.sep)
        self.logger.debug(f"{device}: {path}")

        host_index = self.find_host_segment(parts)
        if host_index is None:
            self.logger.debug(f"{device}: no SCSI host in device path")
            return bare

        port = self.switch_port(parts, host_index)
        if port is None:
            return bare

        bay = self.bay_identifier(parts, host_index + 1 + self.levels)
        if bay is None:
            return bare

        return CompositeIdentifier(uuid=uuid, switch_port=port, bay=bay)
