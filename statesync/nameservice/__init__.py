"""Name-service backends and desired-state manifests."""

from statesync.nameservice.netinfo import NETINFO, NetInfoProperty, registry
from statesync.nameservice.manifest import DesiredResource, load_manifest

__all__ = ["NETINFO", "NetInfoProperty", "registry", "DesiredResource", "load_manifest"]
