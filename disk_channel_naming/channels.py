"""Channel label assignment for attachment points"""

import string
from typing import List, Sequence

from .errors import ConfigError
from .models import AttachmentPoint

DEFAULT_CHANNELS = tuple(string.ascii_uppercase)


def channel_index(bus_pos: int, port_pos: int, port_count: int) -> int:
    """Index of the channel for a bus/port position pair

    Every port of a bus is enumerated before moving on to the next bus.
    """
    return bus_pos * port_count + port_pos


def check_unique(kind: str, values: Sequence) -> None:
    """Reject identifiers listed more than once

    Raises:
        ConfigError: If any value repeats
    """
    repeated = sorted({str(v) for v in values if list(values).count(v) > 1})
    if repeated:
        raise ConfigError(f"{kind} must be unique, repeated: {' '.join(repeated)}")


def _check_labels(channels: Sequence[str], needed: int) -> None:
    check_unique("Channel labels", channels)
    if needed > len(channels):
        raise ConfigError(
            f"{needed} attachment points need a channel label but only "
            f"{len(channels)} labels are configured"
        )


def assign_direct_channels(buses: Sequence[str], ports: Sequence[str],
                           channels: Sequence[str] = DEFAULT_CHANNELS) -> List[AttachmentPoint]:
    """Assign a channel to each bus/port pair, bus-major

    Returns:
        Attachment points in channel order

    Raises:
        ConfigError: If there are more bus/port pairs than channel labels,
            or a bus or port is listed twice
    """
    check_unique("Buses", buses)
    check_unique("Ports", ports)
    _check_labels(channels, len(buses) * len(ports))

    points = []
    for b, bus in enumerate(buses):
        for p, port in enumerate(ports):
            index = channel_index(b, p, len(ports))
            points.append(AttachmentPoint(channel=channels[index], bus=str(bus), port=str(port)))
    return points


def assign_switch_channels(switch_ports: Sequence[int],
                           channels: Sequence[str] = DEFAULT_CHANNELS) -> List[AttachmentPoint]:
    """Assign a channel to each switch port in configured order

    Raises:
        ConfigError: If there are more switch ports than channel labels,
            or a switch port is listed twice
    """
    check_unique("Switch ports", switch_ports)
    _check_labels(channels, len(switch_ports))

    return [AttachmentPoint(channel=channels[s], switch_port=int(port))
            for s, port in enumerate(switch_ports)]
