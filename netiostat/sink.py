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

"""Metric sinks

Collectors hand each sample to a sink as (name, fields, tags, kind) records.
The Prometheus sink exposes the records of the latest sample as one metric
family per field, e.g. for a `net` counter record:

netiostat_net_bytes_recv_total{interface="eth0",mtu="1500",state="up"} 200.0
"""

import enum
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily


class MetricKind(enum.Enum):
    COUNTER = "counter"
    UNTYPED = "untyped"


class MetricRecord(NamedTuple):
    name: str
    fields: Dict[str, float]
    tags: Dict[str, str]
    kind: MetricKind


class MetricsSink(ABC):
    @abstractmethod
    def emit(self, name: str, fields: Dict[str, float], tags: Dict[str, str], kind: MetricKind):
        pass

    def add_counter(self, name, fields, tags):
        self.emit(name, fields, tags, MetricKind.COUNTER)

    def add_fields(self, name, fields, tags):
        self.emit(name, fields, tags, MetricKind.UNTYPED)


class Accumulator(MetricsSink):
    """Keeps the records emitted since the last reset."""

    def __init__(self):
        self.records: List[MetricRecord] = []

    def emit(self, name, fields, tags, kind):
        self.records.append(MetricRecord(name, dict(fields), dict(tags), kind))

    def reset(self):
        self.records = []

    def find(self, name: str, **tags) -> List[MetricRecord]:
        """Records with the given name whose tags include all given tags."""
        return [
            record
            for record in self.records
            if record.name == name and all(record.tags.get(k) == v for k, v in tags.items())
        ]


def _sanitize(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_:]", "_", name)


class PrometheusSink(Accumulator):
    """Accumulator that can be registered as a prometheus_client collector."""

    def __init__(self, prefix: str = "netiostat_"):
        super().__init__()
        self.__prefix = prefix

    def collect(self):
        # family name -> (kind, [(tags, value)])
        families = {}
        for record in self.records:
            for field, value in record.fields.items():
                name = _sanitize(f"{self.__prefix}{record.name}_{field}")
                if name not in families:
                    families[name] = (record.kind, [])
                kind, samples = families[name]
                if kind != record.kind:
                    logging.debug(f"Ignoring {record.kind.value} sample for {kind.value} metric {name}")
                    continue
                samples.append((record.tags, value))

        for name, (kind, samples) in families.items():
            labels = sorted({label for tags, _ in samples for label in tags})
            if kind == MetricKind.COUNTER:
                family = CounterMetricFamily(name, f"{name} counter", labels=labels)
            else:
                family = GaugeMetricFamily(name, f"{name} value", labels=labels)
            for tags, value in samples:
                family.add_metric([tags.get(label, "") for label in labels], value)
            yield family
