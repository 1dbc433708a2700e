"""Which exchanges produce request records.

Path patterns are Ant-style globs:
- ``?``  one character other than ``/``
- ``*``  zero or more characters within one path segment
- ``**`` zero or more whole path segments (``/health/**`` also matches ``/health``)

Evaluation order: the global and request switches, then exclude
patterns (any match suppresses), then include patterns (when present,
only matching paths are logged).
"""

from __future__ import annotations

import re
from functools import lru_cache

from applog.config.logging_config import LoggingConfiguration


@lru_cache(maxsize=256)
def compile_path_pattern(pattern: str) -> re.Pattern[str]:
    """Translate an Ant-style path glob into an anchored regex."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("/**", i) and (i + 3 == len(pattern) or pattern[i + 3] == "/"):
            parts.append("(?:/.*)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            parts.append(".*")
            i += 2
            continue
        char = pattern[i]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts))


def path_matches(pattern: str, path: str) -> bool:
    """Check a request path against one Ant-style pattern."""
    return compile_path_pattern(pattern).fullmatch(path) is not None


class RequestLoggingPolicy:
    """Decides whether an exchange gets request records."""

    def __init__(self, configuration: LoggingConfiguration) -> None:
        self._configuration = configuration
        self._exclude = tuple(compile_path_pattern(p) for p in configuration.request.exclude_patterns)
        self._include = tuple(compile_path_pattern(p) for p in configuration.request.include_patterns)

    def should_log(self, path: str) -> bool:
        """Check whether request records should be emitted for ``path``.

        Args:
            path: Request path, without query string.
        """
        if not self._configuration.request_logging_enabled:
            return False
        if any(pattern.fullmatch(path) for pattern in self._exclude):
            return False
        if self._include:
            return any(pattern.fullmatch(path) for pattern in self._include)
        return True
