"""
Output assembler: collects statements in discovery order and renders the script
"""

from __future__ import annotations

RESULT_NAME = "result"
SLOT_TABLE = "t"

PROLOGUE = '''\
import importlib as _importlib
import marshal as _marshal
import types as _types

_ENV = globals()
_INF = float("inf")
_NAN = float("nan")


def _table():
    from graphdump.table import Table

    return Table()


def _setmeta(table, meta):
    table.meta = meta


def _module(name):
    return _importlib.import_module(name)


def _function(code, name, closure=None, env=None):
    return _types.FunctionType(
        _marshal.loads(code), _ENV if env is None else env, name, None, closure
    )


def _cell():
    return _types.CellType()


def _setcell(cell, value):
    cell.cell_contents = value


def _build():
    t = {}
'''

INDENT = "    "


def slot_ref(index: int) -> str:
    return f"{SLOT_TABLE}[{index}]"


class ScriptAssembler:
    def __init__(self):
        self._statements: list[str | None] = []

    def reserve(self) -> int:
        """Reserve a position for a definition that is filled in later"""
        self._statements.append(None)
        return len(self._statements) - 1

    def fill(self, position: int, statement: str) -> None:
        if self._statements[position] is not None:
            raise ValueError(f"Statement position {position} is already filled")
        self._statements[position] = statement

    def emit(self, statement: str) -> None:
        self._statements.append(statement)

    def statements(self) -> list[str]:
        return [s for s in self._statements if s is not None]

    def finish(self, root_ref: str) -> str:
        pending = [i for i, s in enumerate(self._statements) if s is None]
        if pending:
            raise ValueError(f"Unfilled statement positions: {pending}")

        lines = [PROLOGUE]
        for statement in self._statements:
            lines.append(INDENT + statement + "\n")
        lines.append(f"{INDENT}return {root_ref}\n\n\n")
        lines.append(f"{RESULT_NAME} = _build()\n")
        return "".join(lines)
