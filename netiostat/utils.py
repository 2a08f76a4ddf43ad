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

# Shared helpers for netiostat collectors: host path resolution, sysfs/procfs
# reads, and runtime configuration value parsing.

import logging
import os
import re
from typing import List

DEFAULT_HOST_SYS = "/sys"
DEFAULT_HOST_PROC = "/proc"


def getHostSys() -> str:
    """Base path for sysfs reads (overridable via HOST_SYS for containers)."""
    return os.environ.get("HOST_SYS") or DEFAULT_HOST_SYS


def getHostProc() -> str:
    """Base path for procfs reads (overridable via HOST_PROC for containers)."""
    return os.environ.get("HOST_PROC") or DEFAULT_HOST_PROC


def readLines(path) -> List[str]:
    """Read a text file and return its lines without trailing newlines.

    Raises OSError if the file cannot be read and UnicodeDecodeError if it
    is not valid UTF-8.
    """
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def removeQuotes(value: str) -> str:
    """Strip one level of matching single or double quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parseList(value: str) -> List[str]:
    """Split a runtime config list entry.

    Accepts comma and/or whitespace separated values, optionally quoted, and
    an enclosing pair of brackets, e.g. `eth0, en*` or `["eth0", "ib0"]`.
    """
    value = value.strip()
    # a bare "[ab]" is a glob pattern, only unwrap quoted lists
    if value.startswith("[") and value.endswith("]") and ('"' in value or "'" in value):
        value = value[1:-1]
    entries = []
    for entry in re.split(r"[,\s]+", value):
        entry = removeQuotes(entry)
        if entry:
            entries.append(entry)
    return entries


class PrefixFilter(logging.Filter):
    """Prepend a fixed prefix to every log message passing through."""

    def __init__(self, prefix):
        super().__init__()
        self.prefix = prefix

    def filter(self, record):
        record.msg = f"{self.prefix}{record.msg}"
        return True
