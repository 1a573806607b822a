from __future__ import annotations

"""
Host Integration Infrastructure.

Exposes the HostBridge capability interface and its concrete adapters.
"""

from hierfilter.infra.hosts.base import HostBridge
from hierfilter.infra.hosts.http_host import HttpHost
from hierfilter.infra.hosts.memory import MemoryHost

__all__ = [
    "HostBridge",
    "HttpHost",
    "MemoryHost",
]
