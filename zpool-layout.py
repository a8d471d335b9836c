#!/usr/bin/env python3
"""
zpool layout generator

Writes /etc/zfs/zdev.conf, mapping <channel><rank> names to the by-path or
by-id links of the disks found on each configured bus/port or SAS switch port.
"""

import sys

from disk_channel_naming.cli import ZpoolLayout


if __name__ == "__main__":
    try:
        sys.exit(ZpoolLayout().run())
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(1)
