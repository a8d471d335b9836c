"""Unit tests for data models."""

from disk_channel_naming.models import (
    AttachmentPoint,
    ChannelGroup,
    CompositeIdentifier,
    DeviceLink,
    NamingEntry,
    TopologyMode,
)


class TestCompositeIdentifier:
    """Tests for CompositeIdentifier."""

    def test_bare(self) -> None:
        ident = CompositeIdentifier("abcd1234")
        assert not ident.decorated
        assert str(ident) == "abcd1234"

    def test_decorated(self) -> None:
        ident = CompositeIdentifier("abcd1234", switch_port=1, bay="7")
        assert str(ident) == "abcd1234-switch-port:1-slot:7"

    def test_port_without_bay_is_bare(self) -> None:
        assert str(CompositeIdentifier("abcd1234", switch_port=1)) == "abcd1234"

    def test_parse(self) -> None:
        ident = CompositeIdentifier.parse("35000c500-x-switch-port:12-slot:3")
        assert ident == CompositeIdentifier("35000c500-x", switch_port=12, bay="3")

    def test_parse_bare(self) -> None:
        assert CompositeIdentifier.parse("35000c500") == CompositeIdentifier("35000c500")


class TestNamingEntry:
    """Tests for NamingEntry."""

    def test_line(self) -> None:
        entry = NamingEntry("A", 3, "pci-0000:01:00.0-sas")
        assert entry.alias == "A3"
        assert entry.line == "A3\tpci-0000:01:00.0-sas"


class TestChannelGroup:
    """Tests for ChannelGroup."""

    def test_raw_slots_unique_and_sorted(self) -> None:
        point = AttachmentPoint(channel="A", bus="01", port="4")
        group = ChannelGroup(point=point, links=[
            DeviceLink("a", "a", 10), DeviceLink("b", "b", 2), DeviceLink("c", "c", 10),
        ])

        assert group.raw_slots == [2, 10]

    def test_sorted_entries(self) -> None:
        point = AttachmentPoint(channel="B", switch_port=3)
        group = ChannelGroup(point=point, entries=[
            NamingEntry("B", 11, "x"), NamingEntry("B", 2, "y"), NamingEntry("B", 5, "z"),
        ])

        assert point.mode is TopologyMode.SWITCH
        assert [e.rank for e in group.sorted_entries] == [2, 5, 11]
