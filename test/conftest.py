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

import configparser

import pytest

from netiostat.stats import (
    FLAG_BROADCAST,
    FLAG_LOOPBACK,
    FLAG_RUNNING,
    FLAG_UP,
    InterfaceCounters,
    InterfaceMetadata,
    StatsError,
    StatsSource,
)


class FakeStats(StatsSource):
    """In-memory StatsSource; set *_error to make the matching call fail."""

    def __init__(self, counters=None, interfaces=None, protocols=None):
        self.counters = counters or []
        self.interfaces = interfaces or []
        self.protocols = protocols or []
        self.io_error = None
        self.interfaces_error = None
        self.proto_error = None
        self.proto_calls = 0

    def net_io(self):
        if self.io_error:
            raise self.io_error
        return self.counters

    def net_interfaces(self):
        if self.interfaces_error:
            raise self.interfaces_error
        return self.interfaces

    def net_proto(self):
        self.proto_calls += 1
        if self.proto_error:
            raise self.proto_error
        return self.protocols


def make_config(net_section: str = "") -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    config.read_string("[netiostat.collectors]\n[netiostat.collectors.net]\n" + net_section)
    return config


@pytest.fixture
def stats():
    """Typical host: one up NIC, loopback, one down NIC and a docker bridge."""
    return FakeStats(
        counters=[
            InterfaceCounters("eth0", bytes_sent=100, bytes_recv=200),
            InterfaceCounters("lo", bytes_sent=5000, bytes_recv=5000, packets_sent=50, packets_recv=50),
            InterfaceCounters("eth1", bytes_sent=7, bytes_recv=9, errin=1, dropout=2),
            InterfaceCounters("docker0", packets_sent=3, packets_recv=4),
        ],
        interfaces=[
            InterfaceMetadata("eth0", FLAG_UP | FLAG_BROADCAST | FLAG_RUNNING, 1500),
            InterfaceMetadata("lo", FLAG_UP | FLAG_LOOPBACK | FLAG_RUNNING, 65536),
            InterfaceMetadata("eth1", FLAG_BROADCAST, 9000),
            InterfaceMetadata("docker0", FLAG_UP | FLAG_BROADCAST, 1500),
        ],
        protocols=[
            ("Tcp", {"ActiveOpens": 5, "PassiveOpens": 2}),
            ("Udp", {"InDatagrams": 42}),
        ],
    )


@pytest.fixture
def sysfs(tmp_path):
    """Build a fake <sys>/class/net tree; returns (base path, writer)."""

    def write(interface, **attributes):
        path = tmp_path / "class" / "net" / interface
        path.mkdir(parents=True, exist_ok=True)
        for name, value in attributes.items():
            (path / name).write_text(value)
        return path

    return tmp_path, write


@pytest.fixture
def proto_error():
    return StatsError("unable to read /proc/net/snmp")
