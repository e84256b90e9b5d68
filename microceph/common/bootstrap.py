"""Bootstrap parameters and their string-map encoding."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass
class BootstrapConfig:
    """Network parameters given when bootstrapping a cluster."""

    mon_ip: str = ""
    public_net: str = ""
    cluster_net: str = ""


def encode_bootstrap_config(data: BootstrapConfig) -> dict[str, str]:
    """Encode the configuration as a string map."""
    return {
        "MonIp": data.mon_ip,
        "PublicNet": data.public_net,
        "ClusterNet": data.cluster_net,
    }


def decode_bootstrap_config(data: Mapping[str, str]) -> BootstrapConfig:
    """Decode a string map; missing entries become empty strings."""
    return BootstrapConfig(
        mon_ip=data.get("MonIp", ""),
        public_net=data.get("PublicNet", ""),
        cluster_net=data.get("ClusterNet", ""),
    )