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

"""Interface selection

Decides which network interfaces are reported on each sample. Two policies
are supported:

* an explicit list of interface names or glob patterns (`eth0`, `en*`,
  `ib[0-3]`). Matching interfaces are always reported, even when down or
  loopback.
* the default policy when no list is configured: only interfaces that are up
  and not loopback are reported.
"""

import fnmatch
import logging
import re
from typing import Dict, List, Optional

from netiostat.stats import FLAG_LOOPBACK, FLAG_UP, InterfaceMetadata

GLOB_CHARS = "*?["


class FilterCompileError(ValueError):
    pass


def _check_glob(pattern: str):
    """Reject character classes that are never closed."""
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] == "[":
            j = i + 1
            if j < n and pattern[j] == "!":
                j += 1
            # a leading "]" is a literal member of the class
            if j < n and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end < 0:
                raise FilterCompileError(f"unterminated character class in pattern '{pattern}'")
            i = end
        i += 1


class Filter:
    """Compiled set of interface name patterns."""

    def __init__(self, exact, globs):
        self.__exact = frozenset(exact)
        self.__globs = globs

    def match(self, name: str) -> bool:
        if name in self.__exact:
            return True
        return any(glob.match(name) for glob in self.__globs)


def compile_filter(patterns: List[str]) -> Optional[Filter]:
    """Compile interface name patterns into a Filter.

    Returns None for an empty list. Raises FilterCompileError on invalid
    patterns.
    """
    if not patterns:
        return None

    exact = []
    globs = []
    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern:
            raise FilterCompileError(f"invalid interface pattern: {pattern!r}")
        if any(c in pattern for c in GLOB_CHARS):
            _check_glob(pattern)
            try:
                globs.append(re.compile(fnmatch.translate(pattern)))
            except re.error as e:
                raise FilterCompileError(f"invalid interface pattern '{pattern}': {e}") from e
        else:
            exact.append(pattern)
    return Filter(exact, globs)


class InterfaceFilter:
    """Per-collector interface selection policy.

    The explicit pattern list is compiled lazily on first use and the result
    kept for the lifetime of the owning collector.
    """

    def __init__(self, patterns: List[str], skip_checks: bool = False):
        self.__patterns = list(patterns)
        self.__skip_checks = skip_checks
        self.__filter = None

    @property
    def explicit(self) -> bool:
        return len(self.__patterns) != 0

    def compile(self):
        if self.explicit and self.__filter is None:
            self.__filter = compile_filter(self.__patterns)
            logging.debug(f"compiled interface filter {self.__patterns}")

    def accepts(self, name: str, interfaces: Dict[str, InterfaceMetadata]) -> bool:
        if self.explicit:
            self.compile()
            return self.__filter.match(name)

        if self.__skip_checks:
            return True

        iface = interfaces.get(name)
        if iface is None:
            return False
        if iface.flags & FLAG_LOOPBACK:
            return False
        if not iface.flags & FLAG_UP:
            return False
        return True
