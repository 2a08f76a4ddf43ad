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

"""Network statistics sources

Per-interface I/O counters and interface metadata are read through psutil.
System-wide protocol statistics are parsed from /proc/net/snmp, e.g.:

Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens PassiveOpens ...
Tcp: 1 200 120000 -1 5 2 ...
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Tuple

import psutil

import netiostat.utils as utils

# Interface flag bits
FLAG_UP = 1 << 0
FLAG_BROADCAST = 1 << 1
FLAG_LOOPBACK = 1 << 2
FLAG_POINTTOPOINT = 1 << 3
FLAG_MULTICAST = 1 << 4
FLAG_RUNNING = 1 << 5

# psutil reports interface flags as a comma separated string
PSUTIL_FLAGS = {
    "up": FLAG_UP,
    "broadcast": FLAG_BROADCAST,
    "loopback": FLAG_LOOPBACK,
    "pointopoint": FLAG_POINTTOPOINT,
    "multicast": FLAG_MULTICAST,
    "running": FLAG_RUNNING,
}


class StatsError(RuntimeError):
    pass


class InterfaceCounters(NamedTuple):
    name: str
    bytes_sent: int = 0
    bytes_recv: int = 0
    packets_sent: int = 0
    packets_recv: int = 0
    errin: int = 0
    errout: int = 0
    dropin: int = 0
    dropout: int = 0


class InterfaceMetadata(NamedTuple):
    name: str
    flags: int = 0
    mtu: int = 0


ProtocolStats = List[Tuple[str, Dict[str, int]]]


def parse_flags(flags: str) -> int:
    mask = 0
    for flag in flags.split(","):
        mask |= PSUTIL_FLAGS.get(flag.strip(), 0)
    return mask


def parse_snmp(lines: List[str]) -> ProtocolStats:
    """Parse /proc/net/snmp style content.

    Each protocol spans two lines: a header naming the statistics and a line
    with the matching values, both prefixed by `<Protocol>:`.
    """
    lines = [line for line in lines if line.strip()]
    if len(lines) % 2 != 0:
        raise StatsError("unexpected number of lines in protocol statistics")

    protocols = []
    for header, values in zip(lines[0::2], lines[1::2]):
        proto, _, names = header.partition(":")
        value_proto, _, data = values.partition(":")
        if proto != value_proto:
            raise StatsError(f"mismatched protocol statistics lines: {proto} vs {value_proto}")
        names = names.split()
        data = data.split()
        if len(names) != len(data):
            raise StatsError(f"mismatched number of {proto} statistics: {len(names)} names, {len(data)} values")
        try:
            stats = {name: int(value) for name, value in zip(names, data)}
        except ValueError as e:
            raise StatsError(f"invalid {proto} statistic: {e}") from e
        protocols.append((proto, stats))
    return protocols


class StatsSource(ABC):
    """OS level source of network statistics."""

    @abstractmethod
    def net_io(self) -> List[InterfaceCounters]:
        pass

    @abstractmethod
    def net_interfaces(self) -> List[InterfaceMetadata]:
        pass

    @abstractmethod
    def net_proto(self) -> ProtocolStats:
        pass


class PsutilStats(StatsSource):
    def __init__(self, proc_path: str = None):
        self.__proc_path = proc_path or utils.getHostProc()

    def net_io(self) -> List[InterfaceCounters]:
        counters = psutil.net_io_counters(pernic=True)
        return [
            InterfaceCounters(
                name=name,
                bytes_sent=io.bytes_sent,
                bytes_recv=io.bytes_recv,
                packets_sent=io.packets_sent,
                packets_recv=io.packets_recv,
                errin=io.errin,
                errout=io.errout,
                dropin=io.dropin,
                dropout=io.dropout,
            )
            for name, io in counters.items()
        ]

    def net_interfaces(self) -> List[InterfaceMetadata]:
        interfaces = []
        for name, stat in psutil.net_if_stats().items():
            flags = parse_flags(stat.flags)
            # flags is an empty string on platforms without interface flags
            # (Windows); isup is then the only indication the link is up
            if stat.isup:
                flags |= FLAG_UP
            interfaces.append(InterfaceMetadata(name=name, flags=flags, mtu=stat.mtu))
        return interfaces

    def net_proto(self) -> ProtocolStats:
        path = os.path.join(self.__proc_path, "net", "snmp")
        try:
            lines = utils.readLines(path)
        except OSError as e:
            raise StatsError(f"unable to read {path}: {e}") from e
        return parse_snmp(lines)


def fetch_interfaces(source: StatsSource) -> Tuple[List[InterfaceCounters], Dict[str, InterfaceMetadata]]:
    """Fetch counters and the name -> metadata lookup for one sample.

    Raises StatsError when either call fails.
    """
    try:
        counters = source.net_io()
    except Exception as e:
        raise StatsError(f"error getting net io info: {e}") from e

    try:
        metadata = source.net_interfaces()
    except Exception as e:
        raise StatsError(f"error getting list of interfaces: {e}") from e

    interfaces = {}
    for iface in metadata:
        interfaces[iface.name] = iface

    logging.debug(f"NET: fetched {len(counters)} counter sets, {len(interfaces)} interfaces")
    return counters, interfaces
