#!/usr/bin/env python3
"""
core/outcome.py

Tagged outcome of one delegated client call.

The client overloads its return channel with sentinels (False, None, row
counts). The gateway converts that into Success or Failure immediately after
each call so nothing downstream re-tests sentinel values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from core.errors import ErrorDiagnostic, QueryError


@dataclass(frozen=True)
class Success:
    value: Any = None


@dataclass(frozen=True)
class Failure:
    diagnostic: ErrorDiagnostic


CommandOutcome = Union[Success, Failure]


def unwrap(outcome: CommandOutcome) -> Any:
    """
    Return the success value or raise the failure as QueryError.
    """
    if isinstance(outcome, Failure):
        raise QueryError(outcome.diagnostic)
    return outcome.value
