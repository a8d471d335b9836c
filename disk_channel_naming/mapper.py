"""Generation of the <channel><rank> naming file"""

import logging
import os
import subprocess
import tempfile
from typing import Dict, List, Optional

from .channels import assign_direct_channels, assign_switch_channels
from .config import LayoutConfig
from .models import AttachmentPoint, ChannelGroup, DeviceLink, NamingEntry, TopologyMode
from .namespace import DeviceNamespace
from .slot_map import SlotMap

TRIGGER_COMMAND = ["udevadm", "trigger", "--action=change", "--subsystem-match=block"]
SETTLE_COMMAND = ["udevadm", "settle"]


class TopologyMapper:
    """Builds the naming table for every configured attachment point

    The mapper only reorganizes names already present in the scanned
    namespace. Each run regenerates the whole file.
    """

    def __init__(self, config: LayoutConfig, namespace: DeviceNamespace,
                 slot_map: Optional[SlotMap] = None, logger: Optional[logging.Logger] = None):
        """Initialize the mapper

        Args:
            config: Validated layout configuration
            namespace: Source of device-link names
            slot_map: Raw slot remapping, identity when None
            logger: Logger instance
        """
        self.config = config
        self.namespace = namespace
        self.slot_map = slot_map or SlotMap.identity()
        self.logger = logger or logging.getLogger(__name__)

    def attachment_points(self) -> List[AttachmentPoint]:
        """Attachment points in channel order

        Raises:
            ConfigError: If there are more attachment points than channel labels
        """
        if self.config.mode is TopologyMode.SWITCH:
            return assign_switch_channels(self.config.switch_ports, self.config.channels)
        return assign_direct_channels(self.config.buses, self.config.ports, self.config.channels)

    def scan(self) -> List[ChannelGroup]:
        """Scan the namespace and build naming entries per channel"""
        groups = []

        for point in self.attachment_points():
            if point.mode is TopologyMode.SWITCH:
                links = self.namespace.links_for_switch_port(point.switch_port, self.config.label_prefix)
            else:
                links = self.namespace.links_for_port(point.bus, point.port)

            if not links:
                self.logger.info(f"Channel {point.channel} ({point.description}): no disks found")

            group = ChannelGroup(point=point, links=links, entries=self._build_entries(point, links))
            self.logger.debug(f"Channel {point.channel}: {len(group.entries)} entries")
            groups.append(group)

        return groups

    def _build_entries(self, point: AttachmentPoint, links: List[DeviceLink]) -> List[NamingEntry]:
        entries = []
        seen: Dict[int, str] = {}

        for link in links:
            rank = self.slot_map.lookup(link.raw_slot)
            if rank is None:
                self.logger.warning(
                    f"Channel {point.channel}: slot {link.raw_slot} has no entry in "
                    f"{self.slot_map.source}, skipping {link.link}"
                )
                continue

            if rank in seen and seen[rank] != link.link:
                self.logger.warning(
                    f"Channel {point.channel}: rank {rank} used by both {seen[rank]} and {link.link}"
                )
            seen.setdefault(rank, link.link)
            entries.append(NamingEntry(channel=point.channel, rank=rank, link=link.link))

        return entries

    def render(self, groups: List[ChannelGroup]) -> str:
        """Render the naming file for scanned groups"""
        lines = ["#"]

        if self.config.mode is TopologyMode.SWITCH:
            lines.append("# Custom /dev/disk/by-id to /dev/disk/zpool mapping,")
        else:
            lines.append("# Custom /dev/disk/by-path to /dev/disk/zpool mapping,")
        lines.append("# based on the following physical cable layout.")
        lines.append("#")

        if self.config.mode is TopologyMode.SWITCH:
            lines.extend(self._switch_layout(groups))
        else:
            lines.extend(self._host_port_layout(groups))
        lines.append("#")

        # Channel/disk summary documents raw slots, before remapping
        lines.append("# ----------------- Channel/Disk Layout -------------------")
        lines.append("# Channel  Disks")
        for group in groups:
            slots = "".join(f"{slot}," for slot in group.raw_slots)
            lines.append(f"# {group.point.channel:<9}{slots}")
        lines.append("#")

        for group in groups:
            lines.append("")
            lines.append(f"# Channel {group.point.channel}, {group.point.description}")
            lines.extend(entry.line for entry in group.sorted_entries)

        return "\n".join(line.rstrip() for line in lines) + "\n"

    def _host_port_layout(self, groups: List[ChannelGroup]) -> List[str]:
        channel_of = {(g.point.bus, g.point.port): g.point.channel for g in groups}
        lines = ["# ------------------ Host Port Layout ---------------------"]
        lines.append("#          " + "".join(f"{bus:<8}" for bus in self.config.buses))

        for port in self.config.ports:
            cells = "".join(f"{channel_of[(bus, port)]:<8}" for bus in self.config.buses)
            lines.append(f"# Port {port:<2}  {cells}")

        return lines

    def _switch_layout(self, groups: List[ChannelGroup]) -> List[str]:
        lines = ["# ----------------- Switch Port Layout --------------------"]
        lines.append("# Switch Port  Channel")
        for group in groups:
            lines.append(f"# {group.point.switch_port:<13}{group.point.channel}")
        return lines

    def write(self, text: str, path: Optional[str] = None) -> str:
        """Atomically replace the naming file with text

        The content goes to a temporary file next to the target which is
        then renamed over it, so readers never see a partial file.

        Returns:
            str: Path written
        """
        path = path or self.config.output
        directory = os.path.dirname(os.path.abspath(path))

        with tempfile.NamedTemporaryFile(
            dir=directory, prefix=f".{os.path.basename(path)}.", suffix='.tmp',
            mode='w', encoding='utf-8', delete=False
        ) as tmp:
            try:
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            except BaseException:
                tmp.close()
                os.unlink(tmp.name)
                raise

        try:
            os.chmod(tmp.name, 0o644)
            os.replace(tmp.name, path)
        except BaseException:
            os.unlink(tmp.name)
            raise

        self.logger.info(f"Wrote {path}")
        return path

    def generate(self, dry_run: bool = False) -> List[ChannelGroup]:
        """Scan, render and write the naming file

        Args:
            dry_run: Print the file to stdout instead of writing it

        Returns:
            The scanned channel groups
        """
        groups = self.scan()
        text = self.render(groups)

        if dry_run:
            print(text, end="")
        else:
            self.write(text)

        return groups

    def trigger_rescan(self) -> None:
        """Ask udev to reprocess block devices and wait for it to settle"""
        for cmd in (TRIGGER_COMMAND, SETTLE_COMMAND):
            self.logger.debug(f"Executing command: {' '.join(cmd)}")
            try:
                subprocess.check_output(cmd, stderr=subprocess.STDOUT)
            except (subprocess.CalledProcessError, OSError) as e:
                self.logger.error(f"Error executing command {' '.join(cmd)}: {e}")
                return
