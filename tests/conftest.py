"""Shared fixtures for disk channel naming tests."""

import logging
import os

import pytest

from disk_channel_naming.config import LayoutConfig
from disk_channel_naming.models import TopologyMode

HBA_PATH = ("devices", "pci0000:00", "0000:00:03.0", "0000:02:00.0")


def make_by_path_name(bus, port, slot, wwn="5000c50003aa0b11"):
    """by-path style name: the slot is the seventh dash separated field."""
    return f"pci-0000:{bus}:00.0-sas-phy0-0x{wwn}:{port}-lun0-{slot}"


def make_by_id_name(uuid, switch_port, bay, prefix="scsi-"):
    return f"{prefix}{uuid}-switch-port:{switch_port}-slot:{bay}"


@pytest.fixture
def direct_config(tmp_path):
    return LayoutConfig(
        mode=TopologyMode.DIRECT,
        buses=("01", "02"),
        ports=("4", "0"),
        output=str(tmp_path / "zdev.conf"),
    )


@pytest.fixture
def switch_config(tmp_path):
    return LayoutConfig(
        mode=TopologyMode.SWITCH,
        switch_ports=(2, 0),
        output=str(tmp_path / "zdev.conf"),
    )


@pytest.fixture
def sysfs(tmp_path):
    """Factory building a synthetic sysfs tree for one block device.

    Returns a function taking the device name and optional topology pieces;
    it creates /block/<dev> as a symlink into /devices and returns the sysfs
    root.
    """
    root = tmp_path / "sys"

    def build(device="sdb", host=True, phys=("phy-0:0:4", "phy-0:0:5"), bay="7",
              end_device=True):
        segments = list(HBA_PATH)
        if host:
            segments += ["host0", "port-0:0", "expander-0:0", "port-0:0:4"]
            container = root.joinpath(*segments)
            if end_device:
                segments += ["end_device-0:0:4"]
            segments += ["target0:0:4", "0:0:4:0"]
        else:
            container = None
            segments += ["ata1", "target1:0:0", "1:0:0:0"]

        device_dir = root.joinpath(*segments, "block", device)
        device_dir.mkdir(parents=True)

        if container is not None:
            for phy in phys:
                (container / phy).mkdir()
            if end_device and bay is not None:
                attr_dir = container / "end_device-0:0:4" / "sas_device" / "end_device-0:0:4"
                attr_dir.mkdir(parents=True)
                (attr_dir / "bay_identifier").write_text(f"{bay}\n")

        (root / "block").mkdir(exist_ok=True)
        os.symlink(device_dir, root / "block" / device)
        return str(root)

    return build


@pytest.fixture
def by_path_name():
    return make_by_path_name


@pytest.fixture
def by_id_name():
    return make_by_id_name


@pytest.fixture(autouse=True)
def reset_cli_loggers():
    """Drop handlers bound to a test's captured stderr."""
    yield
    for name in ("zpool-layout", "sas-switch-id"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
