#!/usr/bin/env python3
"""
SAS switch uid callout for multipath

Usage in multipath.conf:
    getuid_callout "/usr/local/bin/sas-switch-id.py %n"
"""

import sys

from disk_channel_naming.cli import SasSwitchId


if __name__ == "__main__":
    sys.exit(SasSwitchId().run())
