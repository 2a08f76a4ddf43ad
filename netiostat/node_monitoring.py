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

# Prometheus exporter for host network statistics.
#
# Serves the latest sample of all enabled collectors at /metrics using a
# single gunicorn worker. Each request triggers one collection pass.
# --

import argparse
import configparser
import logging
import os
import re
import sys

import gunicorn.app.base
from flask import Flask, abort, request

import netiostat
from netiostat import utils
from netiostat.interface_filter import FilterCompileError, compile_filter
from netiostat.monitor import Monitor

DEFAULT_CONFIG = "/etc/netiostat/netiostat.config"


class NetiostatServer(gunicorn.app.base.BaseApplication):
    def __init__(self, app, options=None):
        self.options = options or {}
        self.application = app
        super().__init__()

    def load_config(self):
        config = {key: value for key, value in self.options.items() if key in self.cfg.settings and value is not None}
        for key, value in config.items():
            self.cfg.set(key.lower(), value)

    def load(self):
        return self.application


def create_app(monitor: Monitor, allowed_ips=None) -> Flask:
    """Flask app exposing the monitor's latest sample at /metrics."""
    app = Flask("netiostat")

    @app.before_request
    def restrict_ips():
        if allowed_ips and request.remote_addr not in allowed_ips:
            abort(403)

    @app.route("/metrics")
    def metrics():
        return (monitor.updateAllMetrics(), {"Content-Type": "text/plain; charset=utf-8"})

    return app


def readConfig(configFile: str) -> configparser.ConfigParser:
    config = configparser.ConfigParser()
    if not os.path.isfile(configFile):
        logging.error(f"[ERROR]: Unable to access runtime config file: {configFile}")
        sys.exit(1)
    config.read(configFile)
    return config


def checkConfig(config: configparser.ConfigParser):
    """Reject interface patterns that cannot be compiled.

    Runs before the server starts: collectors register in the forked worker,
    where exiting only causes gunicorn to spawn a replacement.
    """
    if not config.has_section("netiostat.collectors.net"):
        return
    patterns = utils.parseList(config["netiostat.collectors.net"].get("interfaces", ""))
    try:
        compile_filter(patterns)
    except FilterCompileError as e:
        logging.error(f"[ERROR]: Invalid runtime config file: {e}")
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description="Prometheus exporter for host network I/O statistics")
    parser.add_argument("--configfile", type=str, help="runtime config file", default=None)
    parser.add_argument("--logfile", type=str, help="log to file instead of stdout", default=None)
    parser.add_argument("--version", action="version", version=netiostat.__version__)
    args = parser.parse_args()

    configFile = args.configfile or os.environ.get("NETIOSTAT_CONFIG", DEFAULT_CONFIG)
    config = readConfig(configFile)

    monitor = Monitor(config, logFile=args.logfile)
    checkConfig(config)

    collectors = config["netiostat.collectors"]
    port = collectors.get("port", "8001")
    host = utils.removeQuotes(collectors.get("host", "0.0.0.0"))
    allowed_ips = re.split(r",\s*", collectors.get("allowed_ips", "127.0.0.1"))
    logging.info("Allowed query IPs = %s" % allowed_ips)

    app = create_app(monitor, allowed_ips)

    def post_fork(server, worker):
        monitor.initMetrics()

    options = {
        "bind": f"{host}:{port}",
        "workers": 1,
        "post_fork": post_fork,
    }
    NetiostatServer(app, options).run()


if __name__ == "__main__":
    main()
