"""
Identifier Scopes
=================

Collision-free name allocation for generated identifiers.

Two scopes exist per compilation:
- INIT: variables and node identifiers inside the init routine
- FILE: routine names emitted at file level (handlers, __update__)

Within a scope the first occurrence of a base name is the bare name and
the Nth occurrence (N > 1) is ``<name><N-1>``, skipping any name already
issued or registered in the scope:

    >>> table = ScopeTable()
    >>> [table.next_identifier(ScopeKind.INIT, "label") for _ in range(3)]
    ['label', 'label1', 'label2']

BrightScript names are case-insensitive, so counts are keyed on the
lowercase name.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ScopeKind(Enum):
    FILE = "File"
    INIT = "Init"


class Scope:
    """Occurrence counters and issued names for one scope."""

    def __init__(self, kind: ScopeKind):
        self.kind = kind
        self._counts: dict[str, int] = {}
        self._taken: set[str] = set()

    def register(self, name: str) -> int:
        """Record one more occurrence of ``name``; return the new count."""
        key = name.lower()
        self._counts[key] = self._counts.get(key, 0) + 1
        self._taken.add(key)
        return self._counts[key]

    def next_identifier(self, name: str) -> str:
        """
        Allocate the next free name for ``name``.

        A numbered name already issued for another base is skipped, so
        ``label, label1`` followed by a ``label1`` base yields ``label11``.
        """
        key = name.lower()
        count = self._counts.get(key, 0)
        candidate = name if count == 0 else f"{name}{count}"
        while candidate.lower() in self._taken:
            count += 1
            candidate = f"{name}{count}"
        self._counts[key] = count + 1
        self._taken.add(candidate.lower())
        return candidate

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._taken


class ScopeTable:
    """
    The scopes of one compilation.

    Created fresh for every compilation and never shared, so independent
    compilations can run side by side.
    """

    def __init__(self):
        self._scopes = {kind: Scope(kind) for kind in ScopeKind}

    def __getitem__(self, kind: ScopeKind) -> Scope:
        return self._scopes[kind]

    def register(self, kind: ScopeKind, name: str) -> None:
        self._scopes[kind].register(name)

    def next_identifier(self, kind: ScopeKind, name: str) -> str:
        identifier = self._scopes[kind].next_identifier(name)
        logger.debug(f"allocated {kind.value} identifier '{identifier}'")
        return identifier
