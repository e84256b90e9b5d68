"""Shared constants and filesystem locations."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass

# Size constraints
MIN_OSD_SIZE = 2147483648  # 2 GiB

CLIENT_CONFIG_GLOBAL_HOST = "*"
BOOTSTRAP_PORT = 7443

# Time constants
RGW_RESTART_AGE_THRESHOLD = 2  # seconds

# String templates
LOOP_SPEC_ID = "loop,"
DEVICE_PATH_PREFIX = "/dev/disk/by-id/"
RGW_SOCK_PATTERN = "client.radosgw.gateway"
CLI_FORCE_PROMPT = (
    "If you understand the *RISK* and you're *ABSOLUTELY CERTAIN* that is what "
    "you want, pass --yes-i-really-mean-it."
)

CEPH_CONF_FILE_NAME = "ceph.conf"

ADMIN_KEYRING_FIELD_NAME = "keyring.client.admin"
ADMIN_KEYRING_TEMPLATE = "keyring.client.%s"

# Ceph error substrings
RBD_MIRROR_NON_PRIMARY_PROMOTE_ERR = (
    "image is primary within a remote cluster or demotion is not propagated yet"
)

# File modes
PERMISSION_WORLD_NO_ACCESS = 0o750
PERMISSION_ONLY_USER_ACCESS = 0o700

# Regexes
CLUSTER_NAME_REGEX = "^[a-z0-9]+$"

# Replication events
EVENT_ENABLE_REPLICATION = "enable_replication"
EVENT_DISABLE_REPLICATION = "disable_replication"
EVENT_LIST_REPLICATION = "list_replication"
EVENT_STATUS_REPLICATION = "status_replication"
EVENT_CONFIGURE_REPLICATION = "configure_replication"
EVENT_PROMOTE_REPLICATION = "promote_replication"
EVENT_DEMOTE_REPLICATION = "demote_replication"

# Rbd features
RBD_JOURNALING_ENABLE_FEATURE_SET = ("exclusive-lock", "journaling")


def _join(*parts: str) -> str:
    """Join path parts, skipping empty ones, and clean the result."""
    joined = "/".join(part for part in parts if part)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


@dataclass(frozen=True)
class PathConst:
    """Filesystem locations used by the daemon."""

    conf_path: str
    run_path: str
    data_path: str
    log_path: str
    root_fs: str
    proc_path: str
    ssl_files_path: str


def get_path_const() -> PathConst:
    """Build the path set from the current environment."""
    snap_data = os.environ.get("SNAP_DATA", "")
    snap_common = os.environ.get("SNAP_COMMON", "")
    test_root = os.environ.get("TEST_ROOT_PATH", "")
    return PathConst(
        conf_path=_join(snap_data, "conf"),
        run_path=_join(snap_data, "run"),
        data_path=_join(snap_common, "data"),
        log_path=_join(snap_common, "logs"),
        root_fs=_join(test_root, "/"),
        proc_path=_join(test_root, "/proc"),
        ssl_files_path=_join(snap_common, "/"),
    )


def get_path_file_mode() -> dict[str, int]:
    """Map each managed directory to the permission bits it should carry."""
    paths = get_path_const()
    return {
        paths.conf_path: PERMISSION_WORLD_NO_ACCESS,
        paths.run_path: PERMISSION_ONLY_USER_ACCESS,
        paths.data_path: PERMISSION_ONLY_USER_ACCESS,
        paths.log_path: PERMISSION_ONLY_USER_ACCESS,
    }