# -------------------------------------------------------------------------------
# MIT License
#
# Copyright (c) 2023 - 2026 Advanced Micro Devices, Inc. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# -------------------------------------------------------------------------------

"""Interface enrichment

Builds the tag set for a reported interface: base tags derived from interface
metadata plus optional link attributes. On Linux the link attributes come
from sysfs, e.g. for eth0:

/sys/class/net/eth0/carrier -> carrier="up" | "down"
/sys/class/net/eth0/speed   -> speed="10000"
/sys/class/net/eth0/duplex  -> duplex="full"

Each attribute is optional; unreadable or malformed files leave the
corresponding tag out.
"""

import logging
import platform
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, NamedTuple, Optional

import netiostat.utils as utils
from netiostat.stats import FLAG_UP, InterfaceCounters, InterfaceMetadata


class EnrichmentData(NamedTuple):
    carrier: Optional[str] = None
    speed: Optional[int] = None
    duplex: Optional[str] = None

    def as_tags(self) -> Dict[str, str]:
        tags = {}
        if self.carrier is not None:
            tags["carrier"] = self.carrier
        if self.speed is not None:
            tags["speed"] = str(self.speed)
        if self.duplex is not None:
            tags["duplex"] = self.duplex
        return tags


def base_tags(io: InterfaceCounters, iface: Optional[InterfaceMetadata]) -> Dict[str, str]:
    """Tags common to every platform: interface name, MTU and up/down state."""
    mtu = 0
    state = "down"
    if iface is not None:
        mtu = iface.mtu
        if iface.flags & FLAG_UP:
            state = "up"
    return {"interface": io.name, "state": state, "mtu": str(mtu)}


class EnrichmentProvider(ABC):
    """Source of platform specific link attributes."""

    name = None

    @abstractmethod
    def enrich(self, interface: str) -> EnrichmentData:
        pass


class NullEnrichment(EnrichmentProvider):
    """Used on platforms without per-interface link attributes."""

    name = "none"

    def enrich(self, interface: str) -> EnrichmentData:
        return EnrichmentData()


class SysfsEnrichment(EnrichmentProvider):
    """Link attributes from <sys>/class/net/<interface>/."""

    name = "sysfs"

    def __init__(self, base_path: str = None):
        self.__net_path = Path(base_path or utils.getHostSys()) / "class" / "net"

    @staticmethod
    def __read_first_line(path: Path) -> Optional[str]:
        try:
            lines = utils.readLines(path)
        except (OSError, UnicodeDecodeError) as e:
            # carrier/speed reads fail with EINVAL on interfaces that are down
            logging.debug(f"NET: unable to read {path}: {e}")
            return None
        if not lines:
            return None
        return lines[0].strip()

    def carrier(self, interface: str) -> Optional[str]:
        value = self.__read_first_line(self.__net_path / interface / "carrier")
        if value is None:
            return None
        return "up" if value == "1" else "down"

    def speed(self, interface: str) -> Optional[int]:
        value = self.__read_first_line(self.__net_path / interface / "speed")
        # unknown link speed is reported as -1
        if value is None or not value.isdecimal():
            return None
        return int(value)

    def duplex(self, interface: str) -> Optional[str]:
        return self.__read_first_line(self.__net_path / interface / "duplex")

    def enrich(self, interface: str) -> EnrichmentData:
        return EnrichmentData(
            carrier=self.carrier(interface),
            speed=self.speed(interface),
            duplex=self.duplex(interface),
        )


def select_provider(system: str = None) -> EnrichmentProvider:
    """Choose the enrichment provider for the running platform."""
    system = system or platform.system()
    if system == "Linux":
        return SysfsEnrichment()
    return NullEnrichment()
