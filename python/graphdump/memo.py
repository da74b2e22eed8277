"""
Reference memoizer: one slot per distinct object identity
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from graphdump.errors import OutOfBudgetError, SerializationError
from graphdump.introspection import namespace_module
from graphdump.registry import Registry
from graphdump.script import ScriptAssembler, slot_ref
from graphdump.serialize.kind import LITERAL_KINDS, classify
from graphdump.serialize.literals import literal, quote

if TYPE_CHECKING:
    from graphdump.serialize.dispatch import Dispatcher

logger = logging.getLogger(__name__)


class SlotState(Enum):
    # An unseen value simply has no Slot yet
    RESERVED = "reserved"
    DEFINED = "defined"


@dataclass
class Slot:
    index: int
    position: int
    value: Any
    state: SlotState = SlotState.RESERVED

    @property
    def ref(self) -> str:
        return slot_ref(self.index)


class CaptureJoins:
    """Maps a capture cell identity to the slot holding its rebuilt cell"""

    def __init__(self):
        # id(token) -> (token, ref); the token is kept so its id stays valid
        self._cells: dict[int, tuple[object, str]] = {}

    def lookup(self, token: object) -> str | None:
        entry = self._cells.get(id(token))
        if entry is None or entry[0] is not token:
            return None
        return entry[1]

    def register(self, token: object, ref: str) -> None:
        existing = self.lookup(token)
        if existing is not None:
            raise ValueError(f"Capture already bound to {existing}")

        self._cells[id(token)] = (token, ref)

    def __len__(self) -> int:
        return len(self._cells)


class Memoizer:
    def __init__(
        self,
        assembler: ScriptAssembler,
        registry: Registry,
        dispatcher: Dispatcher,
        max_entries: float,
        pinned: dict[int, tuple[object, str]] | None = None,
    ):
        self._assembler = assembler
        self._registry = registry
        self._dispatcher = dispatcher
        self._max_entries = max_entries
        self._pinned = dict(pinned or {})
        self._slots: dict[int, Slot] = {}
        # Slots no graph value owns, such as capture cells
        self._unowned: list[Slot] = []
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def slots(self) -> list[Slot]:
        return sorted([*self._slots.values(), *self._unowned], key=lambda s: s.index)

    def _known(self, value: Any) -> str | None:
        slot = self._slots.get(id(value))
        if slot is not None:
            return slot.ref

        pinned = self._pinned.get(id(value))
        if pinned is not None and pinned[0] is value:
            return pinned[1]

        # A module's globals are taken from the live module, never copied
        module = namespace_module(value)
        if module is not None:
            return f"_module({quote(module)}).__dict__"

        return self._registry.lookup(value)

    def resolve(self, value: Any) -> str:
        """
        Return an expression for ``value`` valid after the statements emitted
        so far.

        The first time an identity is seen its slot is reserved before the
        content is serialized, so a cycle back to the value gets the slot
        reference instead of recursing. Construction dependencies (prepared
        before reserving) may reach the value through a cycle themselves; in
        that case the slot they created is reused.
        """
        known = self._known(value)
        if known is not None:
            return known

        kind = classify(value)
        if kind in LITERAL_KINDS:
            return literal(value, kind)

        serializer = self._dispatcher.serializer_for(kind)
        prepared = serializer.prepare(value, self)

        slot = self._slots.get(id(value))
        if slot is not None:
            return slot.ref

        slot = self._reserve(value)
        definition = serializer.serialize(value, slot.ref, self, prepared)
        self._assembler.fill(slot.position, f"{slot.ref} = {definition.expr}")
        for statement in definition.followups:
            self._assembler.emit(statement)
        slot.state = SlotState.DEFINED
        return slot.ref

    def define(self, expr: str) -> str:
        """Define a new slot owned by no value and return its reference"""
        slot = self._reserve(None, owned=False)
        self._assembler.fill(slot.position, f"{slot.ref} = {expr}")
        slot.state = SlotState.DEFINED
        return slot.ref

    def emit(self, statement: str) -> None:
        self._assembler.emit(statement)

    def _reserve(self, value: Any, owned: bool = True) -> Slot:
        self._size += 1
        if self._size >= self._max_entries:
            raise OutOfBudgetError(self._max_entries)

        slot = Slot(index=self._size, position=self._assembler.reserve(), value=value)
        if owned:
            self._slots[id(value)] = slot
        else:
            self._unowned.append(slot)
        return slot

    def check_defined(self) -> None:
        pending = [s.ref for s in self.slots if s.state != SlotState.DEFINED]
        if pending:
            raise SerializationError(f"Slots left undefined: {', '.join(pending)}")
        logger.debug("Memoized %d slots", len(self.slots))
