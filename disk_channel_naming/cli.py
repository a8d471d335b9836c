"""Command line entry points"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG_FILE, ConfigManager
from .errors import NamingError, UUIDQueryError
from .mapper import TopologyMapper
from .models import TopologyMode
from .namespace import DeviceNamespace, DirectoryNamespace, StaticNamespace
from .resolver import DEFAULT_LEVELS, DEFAULT_PHYS_PER_PORT, IdentityResolver
from .slot_map import SlotMap


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a named logger writing to stderr"""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        ch = logging.StreamHandler()
        formatter = logging.Formatter('[%(levelname)s] %(message)s')
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


class ZpoolLayout:
    """Generates the channel naming file from the current disk links"""

    def __init__(self):
        self.logger = setup_logger("zpool-layout")
        self.args: Optional[argparse.Namespace] = None

    def parse_arguments(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments"""
        parser = argparse.ArgumentParser(
            prog="zpool-layout",
            description="Generates a <channel><rank> to device-link naming file "
                        "from the physical bus/port or SAS switch layout."
        )

        parser.add_argument("-c", "--config-file", default=DEFAULT_CONFIG_FILE,
                            help="YAML configuration file (default: %(default)s)")
        parser.add_argument("-o", "--output", metavar="FILE",
                            help="Naming file to write (default: /etc/zfs/zdev.conf)")
        parser.add_argument("--mode", choices=[m.value for m in TopologyMode],
                            help="Attachment topology")
        parser.add_argument("-b", "--buses", metavar="BUSES",
                            help="Space separated bus list, e.g. '01 02 03'")
        parser.add_argument("-p", "--ports", metavar="PORTS",
                            help="Space separated host port list, e.g. '4 0'")
        parser.add_argument("-s", "--switch-ports", metavar="PORTS",
                            help="Space separated SAS switch port list")
        parser.add_argument("-C", "--channels", metavar="CHANNELS",
                            help="Space separated channel labels (default: A..Z)")
        parser.add_argument("-m", "--mapping", metavar="FILE",
                            help="Slot mapping file, or 'linux' for the kernel slot numbers")
        parser.add_argument("-l", "--label-prefix", metavar="PREFIX",
                            help="by-id name prefix in switch mode (default: scsi-)")
        parser.add_argument("--from-file", metavar="FILE",
                            help="Read device-link names from a saved listing instead of /dev")
        parser.add_argument("-t", "--trigger", action="store_true", default=None,
                            help="Trigger udev to rescan block devices and wait for it to settle")
        parser.add_argument("-n", "--dry-run", action="store_true",
                            help="Print the naming file instead of writing it")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
        parser.add_argument("-q", "--quiet", action="store_true", help="Suppress INFO messages")

        args = parser.parse_args(argv)

        # Configure logger
        if args.verbose:
            setup_logger("zpool-layout", logging.DEBUG)
        elif args.quiet:
            setup_logger("zpool-layout", logging.WARNING)

        self.args = args
        return args

    def _namespace(self, directory: str) -> DeviceNamespace:
        if self.args.from_file:
            return StaticNamespace.from_file(self.args.from_file, logger=self.logger)
        return DirectoryNamespace(directory, logger=self.logger)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point; returns the process exit status"""
        args = self.parse_arguments(argv)

        try:
            config = ConfigManager(args.config_file, logger=self.logger).build({
                "mode": args.mode,
                "buses": args.buses,
                "ports": args.ports,
                "switch_ports": args.switch_ports,
                "channels": args.channels,
                "slot_map": args.mapping,
                "label_prefix": args.label_prefix,
                "output": args.output,
                "trigger": args.trigger
            })
            slot_map = SlotMap.load(config.slot_map, logger=self.logger)
            mapper = TopologyMapper(config, self._namespace(config.namespace_dir),
                                    slot_map=slot_map, logger=self.logger)
            groups = mapper.generate(dry_run=args.dry_run)
        except NamingError as e:
            self.logger.error(str(e))
            return 1
        except OSError as e:
            self.logger.error(f"I/O error: {e}")
            return 1

        self.logger.info(f"Mapped {sum(len(g.entries) for g in groups)} disks on {len(groups)} channels")

        if config.trigger and not args.dry_run:
            mapper.trigger_rescan()

        return 0


class SasSwitchId:
    """Multipath uid callout printing a switch-port decorated UUID"""

    def __init__(self):
        self.logger = setup_logger("sas-switch-id", logging.WARNING)

    def parse_arguments(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments"""
        parser = argparse.ArgumentParser(
            prog="sas-switch-id",
            description="Prints the UUID of a block device, decorated with the SAS "
                        "switch port and enclosure bay when they can be determined."
        )

        parser.add_argument("device", help="Block device name, e.g. sdb")
        parser.add_argument("-p", "--phys-per-port", type=int, default=DEFAULT_PHYS_PER_PORT,
                            help="PHYs per switch port (default: %(default)s)")
        parser.add_argument("--levels", type=int, default=DEFAULT_LEVELS,
                            help="Path levels between host<N> and the PHY container (default: %(default)s)")
        parser.add_argument("--sysfs-root", default="/sys", help=argparse.SUPPRESS)
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

        args = parser.parse_args(argv)

        if args.verbose:
            setup_logger("sas-switch-id", logging.DEBUG)

        return args

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point; returns the process exit status"""
        args = self.parse_arguments(argv)

        try:
            resolver = IdentityResolver(phys_per_port=args.phys_per_port, levels=args.levels,
                                        sysfs_root=args.sysfs_root, logger=self.logger)
            identifier = resolver.resolve(args.device)
        except UUIDQueryError as e:
            self.logger.debug(str(e))
            return 1
        except NamingError as e:
            self.logger.error(str(e))
            return 1

        print(identifier)
        return 0


def layout_main() -> None:
    sys.exit(ZpoolLayout().run())


def switch_id_main() -> None:
    sys.exit(SasSwitchId().run())
