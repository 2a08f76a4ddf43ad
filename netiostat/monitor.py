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

# Prometheus data collector for host network statistics.
#
# Supporting monitor class to drive one or more collectors and render their
# latest sample in Prometheus text format.
# --

import configparser
import importlib
import logging
import os
import platform
import sys
import time

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from netiostat import utils
from netiostat.collector_definitions import COLLECTORS
from netiostat.sink import PrometheusSink


class Monitor:
    def __init__(self, config: configparser.ConfigParser, logFile=None):

        self.config = config  # cache runtime configuration

        logLevel = os.environ.get("NETIOSTAT_LOG_LEVEL", "INFO").upper()
        if logFile:
            hostname = platform.node().split(".", 1)[0]
            logging.basicConfig(
                format=f"[{hostname}: %(asctime)s] %(message)s",
                level=logLevel,
                filename=logFile,
                datefmt="%H:%M:%S",
            )
        else:
            logging.basicConfig(format="%(message)s", level=logLevel, stream=sys.stdout)

        if not self.config.has_section("netiostat.collectors"):
            self.config.add_section("netiostat.collectors")

        # collectors publish into a shared sink exposed through a private registry
        self.__registry = CollectorRegistry()
        self.__sink = PrometheusSink()
        self.__registry.register(self.__sink)

        # initialize collection of data collectors
        self.__collectors = []

        logging.debug("Completed collector initialization (base class)")
        return

    def initMetrics(self):
        for collector in COLLECTORS:
            runtime_option = collector["runtime_option"]
            default = collector["enabled_by_default"]
            if runtime_option:
                enabled = self.config["netiostat.collectors"].getboolean(runtime_option, default)
            else:
                enabled = default
            if enabled:
                module = importlib.import_module(collector["file"])
                cls = getattr(module, collector["className"])
                self.__collectors.append(cls(config=self.config, sink=self.__sink))

        # Initialize all metrics
        prefix_filter = utils.PrefixFilter("   ")
        for collector in self.__collectors:
            logging.info("\nRegistering metrics for collector: %s" % collector.__class__.__name__)
            logging.getLogger().addFilter(prefix_filter)
            try:
                collector.registerMetrics()
            except Exception as e:
                logging.error(f"[ERROR]: Unable to initialize {collector.__class__.__name__} collector: {e}")
                sys.exit(1)
            finally:
                logging.getLogger().removeFilter(prefix_filter)

        # Register performance runtime metric(s)
        self.__subtimers = self.config["netiostat.collectors"].getboolean("enable_perf_collector_subtimers", False)
        labels = ["collector"]
        logging.info(
            "\nRegistering performance metrics for collector timing (subtimers enabled = %s)" % self.__subtimers
        )

        self.__perfMetric = Gauge(
            "netiostat_perf_runtime_seconds",
            "Time to complete one data collection sample in seconds",
            labelnames=labels,
            registry=self.__registry,
        )

        # Gather metrics on startup
        self.updateAllMetrics()

    def updateAllMetrics(self):
        start_time_total = time.perf_counter()

        # each sample replaces the previous one
        self.__sink.reset()

        for collector in self.__collectors:
            start_time = time.perf_counter()
            try:
                collector.updateMetrics()
            except Exception as e:
                logging.error(f"{collector.__class__.__name__}: {e}")
            if self.__subtimers:
                elapsed_time = time.perf_counter() - start_time
                self.__perfMetric.labels(collector.__class__.__name__).set(elapsed_time)

        elapsed_time_total = time.perf_counter() - start_time_total
        self.__perfMetric.labels("total").set(elapsed_time_total)

        return generate_latest(self.__registry)
