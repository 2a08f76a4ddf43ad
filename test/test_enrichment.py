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

import pytest

from netiostat.enrichment import (
    EnrichmentData,
    NullEnrichment,
    SysfsEnrichment,
    base_tags,
    select_provider,
)
from netiostat.stats import FLAG_LOOPBACK, FLAG_UP, InterfaceCounters, InterfaceMetadata


class TestBaseTags:
    def test_up(self):
        tags = base_tags(InterfaceCounters("eth0"), InterfaceMetadata("eth0", FLAG_UP, 1500))
        assert tags == {"interface": "eth0", "state": "up", "mtu": "1500"}

    def test_down(self):
        tags = base_tags(InterfaceCounters("lo"), InterfaceMetadata("lo", FLAG_LOOPBACK, 65536))
        assert tags == {"interface": "lo", "state": "down", "mtu": "65536"}

    def test_without_metadata(self):
        tags = base_tags(InterfaceCounters("wlan0"), None)
        assert tags == {"interface": "wlan0", "state": "down", "mtu": "0"}


class TestEnrichmentData:
    def test_empty(self):
        assert EnrichmentData().as_tags() == {}

    def test_partial(self):
        assert EnrichmentData(speed=1000).as_tags() == {"speed": "1000"}

    def test_zero_speed_is_reported(self):
        assert EnrichmentData(carrier="down", speed=0).as_tags() == {"carrier": "down", "speed": "0"}


class TestSysfsEnrichment:
    def test_all_attributes(self, sysfs):
        base, write = sysfs
        write("eth0", carrier="1\n", speed="10000\n", duplex="full\n")
        data = SysfsEnrichment(str(base)).enrich("eth0")
        assert data == EnrichmentData(carrier="up", speed=10000, duplex="full")
        assert data.as_tags() == {"carrier": "up", "speed": "10000", "duplex": "full"}

    def test_carrier_down(self, sysfs):
        base, write = sysfs
        write("eth0", carrier="0\n")
        assert SysfsEnrichment(str(base)).carrier("eth0") == "down"

    def test_missing_interface(self, sysfs):
        base, _ = sysfs
        assert SysfsEnrichment(str(base)).enrich("eth9") == EnrichmentData()

    def test_attributes_are_independent(self, sysfs):
        base, write = sysfs
        write("eth0", speed="25000\n")
        data = SysfsEnrichment(str(base)).enrich("eth0")
        assert data.speed == 25000
        assert data.carrier is None
        assert data.duplex is None

    @pytest.mark.parametrize("speed", ["-1\n", "unknown\n", "\n", ""])
    def test_invalid_speed(self, sysfs, speed):
        base, write = sysfs
        write("eth0", carrier="1\n", speed=speed, duplex="half\n")
        data = SysfsEnrichment(str(base)).enrich("eth0")
        assert data == EnrichmentData(carrier="up", duplex="half")

    def test_empty_carrier_file(self, sysfs):
        base, write = sysfs
        write("eth0", carrier="")
        assert SysfsEnrichment(str(base)).carrier("eth0") is None

    def test_unreadable_attribute(self, sysfs):
        base, write = sysfs
        path = write("eth0", speed="1000\n")
        # a directory in place of the file fails to open like EINVAL on a down link
        (path / "carrier").mkdir()
        data = SysfsEnrichment(str(base)).enrich("eth0")
        assert data == EnrichmentData(speed=1000)

    def test_undecodable_attribute(self, sysfs):
        base, write = sysfs
        path = write("eth0", carrier="1\n", speed="1000\n")
        (path / "duplex").write_bytes(b"\xff\xfe\n")
        provider = SysfsEnrichment(str(base))
        assert provider.duplex("eth0") is None
        assert provider.enrich("eth0") == EnrichmentData(carrier="up", speed=1000)

    def test_host_sys_override(self, sysfs, monkeypatch):
        base, write = sysfs
        write("ib0", duplex="full\n")
        monkeypatch.setenv("HOST_SYS", str(base))
        assert SysfsEnrichment().duplex("ib0") == "full"


class TestSelectProvider:
    def test_linux(self):
        assert isinstance(select_provider("Linux"), SysfsEnrichment)

    @pytest.mark.parametrize("system", ["Darwin", "Windows", "FreeBSD"])
    def test_other_platforms(self, system):
        provider = select_provider(system)
        assert isinstance(provider, NullEnrichment)
        assert provider.enrich("eth0") == EnrichmentData()
