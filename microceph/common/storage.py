"""Block device inspection."""

from __future__ import annotations

import logging
import os

from microceph.constants import get_path_const

logger = logging.getLogger(__name__)

_OSD_LINKS = ("block", "block.wal", "block.db")


def is_mounted(device: str) -> bool:
    """Tell whether ``device`` appears as a source in the mounts table."""
    paths = get_path_const()
    resolved = os.path.realpath(os.path.join(paths.root_fs, device.lstrip("/")), strict=True)
    with open(os.path.join(paths.proc_path, "mounts"), encoding="utf-8") as mounts:
        for line in mounts:
            parts = line.split()
            if parts and parts[0] == resolved:
                return True
    return False


def is_ceph_device(device: str) -> bool:
    """Tell whether ``device`` backs the block, WAL or DB of any OSD."""
    resolved = os.path.realpath(device, strict=True)
    base_dir = os.path.join(get_path_const().data_path, "osd")
    try:
        entries = sorted(os.scandir(base_dir), key=lambda e: e.name)
    except OSError as err:
        logger.debug("couldn't read osd data dir %s: %s", base_dir, err)
        return False

    for entry in entries:
        if not entry.is_dir() or not entry.name.startswith("ceph-"):
            continue
        for link_name in _OSD_LINKS:
            link_path = os.path.join(base_dir, entry.name, link_name)
            try:
                target = os.path.realpath(link_path, strict=True)
            except FileNotFoundError:
                continue
            except OSError as err:
                logger.error("failed to resolve symlink %s: %s", link_path, err)
                raise
            if target == resolved:
                logger.debug("device %s is used as %s for OSD %s", device, link_name, entry.name)
                return True

    logger.debug("device %s is not used as WAL or DB device for any OSD", device)
    return False