"""Schema repair descriptions used by SchemaGuard."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RepairStep:
    """One additive DDL step.

    ``apply`` receives a synchronous connection and must be safe to run when
    the object already exists, or raise a duplicate-object error that the
    guard treats as success.
    """

    name: str
    apply: Callable[[Any], None]


@dataclass(frozen=True)
class Repair:
    """A named group of steps bringing one area of the schema up to date.

    ``elements`` are the table and column names whose absence identifies this
    repair in a driver error message.
    """

    name: str
    elements: tuple[str, ...]
    steps: tuple[RepairStep, ...] = field(default_factory=tuple)

    def matches(self, message: str) -> bool:
        return any(
            re.search(rf"\b{re.escape(element)}\b", message, re.IGNORECASE)
            for element in self.elements
        )
