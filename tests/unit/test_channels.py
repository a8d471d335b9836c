"""Unit tests for channel assignment."""

import pytest

from disk_channel_naming.channels import (
    DEFAULT_CHANNELS,
    assign_direct_channels,
    assign_switch_channels,
    channel_index,
)
from disk_channel_naming.errors import ConfigError


class TestChannelIndex:
    """Tests for the bus-major index formula."""

    @pytest.mark.parametrize("bus_pos,port_pos,expected", [
        (0, 0, 0), (0, 1, 1), (1, 0, 2), (1, 1, 3), (2, 0, 4), (2, 1, 5),
    ])
    def test_three_buses_two_ports(self, bus_pos, port_pos, expected) -> None:
        assert channel_index(bus_pos, port_pos, 2) == expected


class TestAssignDirectChannels:
    """Tests for bus/port channel assignment."""

    def test_ports_enumerated_before_next_bus(self) -> None:
        """All ports of a bus get consecutive labels."""
        points = assign_direct_channels(["01", "02", "03"], ["4", "0"])

        assert [(p.bus, p.port, p.channel) for p in points] == [
            ("01", "4", "A"),
            ("01", "0", "B"),
            ("02", "4", "C"),
            ("02", "0", "D"),
            ("03", "4", "E"),
            ("03", "0", "F"),
        ]

    def test_custom_labels(self) -> None:
        points = assign_direct_channels(["1"], ["0", "1"], ["X", "Y"])
        assert [p.channel for p in points] == ["X", "Y"]

    def test_description(self) -> None:
        point = assign_direct_channels(["01"], ["4"])[0]
        assert point.description == "Bus 01, Port 4"

    def test_too_few_labels(self) -> None:
        with pytest.raises(ConfigError, match="only 3 labels"):
            assign_direct_channels(["1", "2"], ["0", "1"], ["A", "B", "C"])

    def test_exactly_enough_labels(self) -> None:
        points = assign_direct_channels(["1", "2"], ["0", "1"], ["A", "B", "C", "D"])
        assert len(points) == 4

    def test_repeated_label(self) -> None:
        with pytest.raises(ConfigError, match="unique"):
            assign_direct_channels(["1"], ["0"], ["A", "A"])


class TestAssignSwitchChannels:
    """Tests for switch port channel assignment."""

    def test_follows_configured_order(self) -> None:
        """Labels follow list position, not the port number."""
        points = assign_switch_channels([5, 0, 3])

        assert [(p.switch_port, p.channel) for p in points] == [(5, "A"), (0, "B"), (3, "C")]

    def test_description(self) -> None:
        assert assign_switch_channels([2])[0].description == "Switch Port 2"

    def test_too_many_ports(self) -> None:
        with pytest.raises(ConfigError):
            assign_switch_channels(list(range(len(DEFAULT_CHANNELS) + 1)))


class TestRepeatedAttachmentPoints:
    """Tests rejecting attachment points listed twice."""

    def test_repeated_bus(self) -> None:
        with pytest.raises(ConfigError, match="Buses must be unique, repeated: 01"):
            assign_direct_channels(["01", "02", "01"], ["4"])

    def test_repeated_port(self) -> None:
        with pytest.raises(ConfigError, match="Ports must be unique, repeated: 4"):
            assign_direct_channels(["01"], ["4", "0", "4"])

    def test_repeated_switch_port(self) -> None:
        """A repeated switch port would give one disk two names."""
        with pytest.raises(ConfigError, match="Switch ports must be unique, repeated: 0"):
            assign_switch_channels([0, 0])
