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

"""Network interface I/O

Reports per-interface I/O counters as a `net` counter record per selected
interface, plus one `net` record tagged interface="all" carrying system-wide
protocol statistics. Example records for one sample:

net{interface="eth0",state="up",mtu="1500",carrier="up",speed="10000",duplex="full"}
    bytes_sent=100 bytes_recv=200 packets_sent=1 packets_recv=2 err_in=0
    err_out=0 drop_in=0 drop_out=0 mtu=1500
net{interface="all"} ip_forwarding=1 tcp_activeopens=5 udp_indatagrams=42 ...

By default only interfaces that are up and not loopback are reported. Setting
`interfaces` in the [netiostat.collectors.net] section reports the listed
interfaces (names or glob patterns) regardless of their state.
"""

import configparser
import logging

import netiostat.utils as utils
from netiostat.collector_base import Collector
from netiostat.enrichment import EnrichmentProvider, base_tags, select_provider
from netiostat.interface_filter import InterfaceFilter
from netiostat.sink import MetricsSink
from netiostat.stats import PsutilStats, StatsSource, fetch_interfaces


class NET(Collector):
    def __init__(
        self,
        config: configparser.ConfigParser,
        sink: MetricsSink,
        source: StatsSource = None,
        enrichment: EnrichmentProvider = None,
    ):
        """Initialize the NET data collector.

        Args:
            config (configparser.ConfigParser): Cached copy of runtime configuration.
            sink (MetricsSink): Destination for collected records.
            source (StatsSource, optional): OS statistics source; psutil based by default.
            enrichment (EnrichmentProvider, optional): Link attribute provider;
                selected for the running platform by default.
        """
        logging.debug(f"Initializing {self.__class__.__name__} data collector")

        self.__name = "net"
        self.__sink = sink
        self.__interfaces = []
        self.__ignore_protocol_stats = False
        self.__skip_checks = False

        # runtime config parsing
        if config.has_section("netiostat.collectors.net"):
            section = config["netiostat.collectors.net"]
            self.__interfaces = utils.parseList(section.get("interfaces", ""))
            self.__ignore_protocol_stats = section.getboolean("ignore_protocol_stats", False)
            self.__skip_checks = section.getboolean("skip_checks", False)

        self.__filter = InterfaceFilter(self.__interfaces, skip_checks=self.__skip_checks)
        self.__source = source if source is not None else PsutilStats()
        self.__enrichment = enrichment if enrichment is not None else select_provider()

    def registerMetrics(self):
        """Validate interface selection and report collection policy"""

        # Compile explicit interface patterns up front so configuration
        # errors surface at startup.
        self.__filter.compile()

        if self.__filter.explicit:
            logging.info(f"--> interfaces: {', '.join(self.__interfaces)} (reported regardless of state)")
        elif self.__skip_checks:
            logging.info("--> interfaces: all (state checks disabled)")
        else:
            logging.info("--> interfaces: up, non-loopback")
        logging.info(f"--> link attributes: {self.__enrichment.name}")

        logging.info(f"--> [registered] {self.__name} -> per-interface I/O counters (counter)")
        if not self.__ignore_protocol_stats:
            logging.info(f'--> [registered] {self.__name}{{interface="all"}} -> protocol statistics (untyped)')

    def updateMetrics(self):
        """Collect one sample into the configured sink"""
        self.gather(self.__sink)

    def gather(self, sink: MetricsSink):
        """Collect one sample of interface and protocol statistics.

        Raises StatsError if interface counters or metadata are unavailable and
        FilterCompileError on invalid interface patterns; nothing is emitted
        in either case.
        """
        counters, interfaces = fetch_interfaces(self.__source)
        self.__filter.compile()

        for io in counters:
            if not self.__filter.accepts(io.name, interfaces):
                continue

            iface = interfaces.get(io.name)
            tags = base_tags(io, iface)
            tags.update(self.__enrichment.enrich(io.name).as_tags())

            fields = {
                "bytes_sent": io.bytes_sent,
                "bytes_recv": io.bytes_recv,
                "packets_sent": io.packets_sent,
                "packets_recv": io.packets_recv,
                "err_in": io.errin,
                "err_out": io.errout,
                "drop_in": io.dropin,
                "drop_out": io.dropout,
                "mtu": iface.mtu if iface is not None else 0,
            }
            sink.add_counter(self.__name, fields, tags)

        if not self.__ignore_protocol_stats:
            self.__gather_protocol_stats(sink)

    def __gather_protocol_stats(self, sink: MetricsSink):
        # System-wide stats are best effort; skip them if unavailable.
        try:
            protocols = self.__source.net_proto()
        except Exception as e:
            logging.debug(f"NET: protocol statistics unavailable: {e}")
            return

        fields = {}
        for protocol, stats in protocols:
            for stat, value in stats.items():
                fields[f"{protocol.lower()}_{stat.lower()}"] = value

        if fields:
            sink.add_fields(self.__name, fields, {"interface": "all"})
