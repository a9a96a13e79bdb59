"""
BrightScript Tree Walking
=========================

Traversal helpers over the BrightScript AST:

- ``iter_child_nodes`` / ``walk`` for generic traversal
- ``instance_references`` to find which ``m.<name>`` fields a node reads
- ``instance_target`` to find which ``m.<name>`` field a set statement writes
"""

from dataclasses import fields
from typing import Iterator, Optional

from haiku_sdk.brs.ast import (
    INSTANCE_ROOT,
    BrsNode,
    Statement,
    AssignmentStatement,
    DimStatement,
    DottedGetExpression,
    DottedSetStatement,
    Expression,
    IncrementStatement,
    IndexedGetExpression,
    IndexedSetStatement,
    VariableExpression,
)

# First-level names under m that belong to the runtime, not to the component.
RESERVED_INSTANCE_FIELDS = frozenset(["top", "global"])


def iter_child_nodes(node: BrsNode) -> Iterator[BrsNode]:
    """Yield the direct child nodes of ``node`` in field order."""
    for f in fields(node):
        if f.name == "location":
            continue
        value = getattr(node, f.name)
        if isinstance(value, BrsNode):
            yield value
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, BrsNode):
                    yield item


def walk(node: BrsNode) -> Iterator[BrsNode]:
    """Yield ``node`` and all of its descendants, depth first, pre-order."""
    yield node
    for child in iter_child_nodes(node):
        yield from walk(child)


def _instance_member(expr: Optional[Expression]) -> Optional[str]:
    """
    Return ``name`` when ``expr`` is a path rooted at ``m.name``.

    ``m.a``, ``m.a.b`` and ``m.a[0].b`` all yield ``a``.
    """
    path: list[str] = []
    while True:
        if isinstance(expr, DottedGetExpression):
            path.append(expr.name)
            expr = expr.obj
        elif isinstance(expr, IndexedGetExpression):
            path.clear()
            expr = expr.obj
        else:
            break
    if isinstance(expr, VariableExpression) and expr.name.lower() == INSTANCE_ROOT and path:
        return path[-1]
    return None


def instance_references(node: BrsNode) -> set[str]:
    """
    Collect the first-level instance fields read anywhere inside ``node``.

    >>> instance_references(parse_expression("m.items[m.index].title"))
    {'items', 'index'}
    """
    names: set[str] = set()
    for child in walk(node):
        if isinstance(child, DottedGetExpression):
            name = _instance_member(child)
            if name is not None and name.lower() not in RESERVED_INSTANCE_FIELDS:
                names.add(name)
    return names


def instance_target(statement: Statement) -> Optional[str]:
    """
    Return the first-level instance field written by a set statement.

    ``m.a = 1``, ``m.a.b += 1``, ``m.a[0] = 1`` and ``m.a++`` all write
    ``a``; plain assignments and writes to ``m.top``/``m.global`` return None.
    """
    if isinstance(statement, IncrementStatement):
        name = _instance_member(statement.value)
    elif isinstance(statement, DottedSetStatement):
        if isinstance(statement.obj, VariableExpression) and statement.obj.name.lower() == INSTANCE_ROOT:
            name = statement.name
        else:
            name = _instance_member(statement.obj)
    elif isinstance(statement, IndexedSetStatement):
        name = _instance_member(statement.obj)
    else:
        return None
    if name is None or name.lower() in RESERVED_INSTANCE_FIELDS:
        return None
    return name


def assigned_name(statement: Statement) -> Optional[str]:
    """Return the local variable name written by a plain assignment or ``dim``."""
    if isinstance(statement, AssignmentStatement) and isinstance(statement.target, VariableExpression):
        return statement.target.name
    if isinstance(statement, DimStatement):
        return statement.name
    return None
