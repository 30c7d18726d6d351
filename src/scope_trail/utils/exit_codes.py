"""Centralized exit-code contract for all CLI commands.

Code  Meaning
----  -------
  0   Success
  1   Violation: schema failure, or orphan doc comments with --fail-on-orphans
  2   Error: usage error, missing path, bad config, runtime failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    VIOLATION = 1
    ERROR = 2
