"""
Reactivity Pass
===============

Keeps node fields in sync with the instance variables they are bound to.

When an attribute reads ``m.<name>`` and some routine other than ``init``
later assigns ``m.<name>``, the field must be refreshed. The pass:

1. collects every ``m.<name>`` read by any attribute (the dependency graph)
2. walks every non-init routine; after each assignment to one of those
   names it inserts

       m.__dirty__["name"] = true
       __update__()

3. prepends ``m.__dirty__ = {}`` to ``init``
4. promotes every node with an attribute bound to a reactive variable to
   instance scope, so ``label`` becomes ``m.label`` at every use site
5. builds ``__update__``: one guarded block per reactive variable that
   re-runs the bound attribute assignments and clears the dirty flag

The pass rewrites the generated BrightScript AST in place. Nothing is
rendered to text until the emitter runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from haiku_sdk.brs import instance_references, instance_target, walk
from haiku_sdk.brs.ast import (
    INSTANCE_ROOT,
    AALiteralExpression,
    BinaryExpression,
    Block,
    DottedSetStatement,
    ExpressionStatement,
    ForEachStatement,
    ForStatement,
    FunctionExpression,
    FunctionStatement,
    IfStatement,
    IndexedGetExpression,
    IndexedSetStatement,
    LiteralExpression,
    ScopedVariable,
    Statement,
    TryCatchStatement,
    VariableExpression,
    WhileStatement,
    call,
    dotted,
    string_literal,
)
from haiku_sdk.compiler.errors import InternalCompilerError
from haiku_sdk.compiler.scopes import ScopeKind, ScopeTable

logger = logging.getLogger(__name__)

DIRTY_TABLE = "__dirty__"
UPDATE_ROUTINE = "__update__"


# =============================================================================
# Dependency Graph
# =============================================================================

@dataclass
class DependencyAttribute:
    """
    One bound attribute of a generated node.

    Attributes:
        name: Field name
        set_statements: The statements that assign the field
        scoped_variable_names: ``m.<name>`` fields the statements read
    """
    name: str
    set_statements: list[Statement] = field(default_factory=list)
    scoped_variable_names: set[str] = field(default_factory=set)

    @classmethod
    def from_statements(cls, name: str, statements: list[Statement]) -> "DependencyAttribute":
        names: set[str] = set()
        for statement in statements:
            names |= {reference.lower() for reference in instance_references(statement)}
        return cls(name=name, set_statements=list(statements), scoped_variable_names=names)


@dataclass
class DependencyNode:
    """A generated node and its bound attributes."""
    variable: ScopedVariable
    attributes: list[DependencyAttribute] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.variable.qualified

    @property
    def should_be_scoped(self) -> bool:
        return self.variable.instance

    def depends_on(self, names: set[str]) -> bool:
        return any(attribute.scoped_variable_names & names for attribute in self.attributes)


# =============================================================================
# Statement Builders
# =============================================================================

def _dirty_flag(name: str):
    return IndexedGetExpression(obj=dotted(INSTANCE_ROOT, DIRTY_TABLE), index=string_literal(name))


def _set_dirty(name: str, value: str) -> IndexedSetStatement:
    return IndexedSetStatement(
        obj=dotted(INSTANCE_ROOT, DIRTY_TABLE),
        index=string_literal(name),
        value=LiteralExpression(text=value),
    )


def _nested_blocks(statement: Statement) -> list[Block]:
    if isinstance(statement, IfStatement):
        blocks = [statement.then_branch]
        blocks.extend(clause.body for clause in statement.else_ifs)
        blocks.append(statement.else_branch)
    elif isinstance(statement, (ForStatement, ForEachStatement, WhileStatement)):
        blocks = [statement.body]
    elif isinstance(statement, TryCatchStatement):
        blocks = [statement.try_block, statement.catch_block]
    elif isinstance(statement, Block):
        blocks = [statement]
    else:
        blocks = []
    return [block for block in blocks if block is not None]


# =============================================================================
# Reactivity Pass
# =============================================================================

class ReactivityPass:
    """
    Rewrites the generated routines so bound fields follow their variables.

    Usage:
        update = ReactivityPass(graph, scopes).run(init, routines)

    Attributes:
        reactive: Reactive variable names, in order of first assignment
    """

    def __init__(self, graph: list[DependencyNode], scopes: ScopeTable):
        self.graph = graph
        self.scopes = scopes
        self.reactive: list[str] = []
        self._update_name: Optional[str] = None

    def run(
        self,
        init: Optional[FunctionStatement],
        routines: list[Statement],
    ) -> Optional[FunctionStatement]:
        """
        Instrument ``routines`` and return the update routine.

        Args:
            init: The generated init routine
            routines: Every other top-level routine of the component

        Returns:
            The ``__update__`` routine, or None when no variable is reactive
            (in which case nothing was changed)

        Raises:
            InternalCompilerError: If a bound assignment has no enclosing routine
        """
        referenced = set()
        for node in self.graph:
            for attribute in node.attributes:
                referenced |= attribute.scoped_variable_names
        if not referenced:
            return None

        for routine in routines:
            self._instrument_routine(routine, referenced)

        if not self.reactive:
            return None
        if init is None:
            raise InternalCompilerError("reactive variables found but no init routine was generated")

        logger.debug(f"reactive variables: {', '.join(self.reactive)}")

        init.func.body.statements.insert(
            0,
            DottedSetStatement(obj=VariableExpression(name=INSTANCE_ROOT), name=DIRTY_TABLE, value=AALiteralExpression()),
        )

        reactive = set(self.reactive)
        for node in self.graph:
            if node.depends_on(reactive) and not node.variable.instance:
                node.variable.instance = True
                logger.debug(f"promoted '{node.variable.name}' to instance scope")

        return self._update_routine()

    def _instrument_routine(self, routine: Statement, referenced: set[str]) -> None:
        if isinstance(routine, FunctionStatement) and routine.func.body is not None:
            self._instrument_block(routine.func.body, referenced)
            return

        for node in walk(routine):
            target = instance_target(node) if isinstance(node, Statement) else None
            if target is not None and target.lower() in referenced:
                raise InternalCompilerError(
                    f"assignment to '{INSTANCE_ROOT}.{target}' has no enclosing routine",
                    node.location,
                )

    def _instrument_block(self, block: Block, referenced: set[str]) -> None:
        index = 0
        while index < len(block.statements):
            statement = block.statements[index]
            for nested in _nested_blocks(statement):
                self._instrument_block(nested, referenced)

            target = instance_target(statement)
            if target is not None and target.lower() in referenced:
                name = target.lower()
                if name not in self.reactive:
                    self.reactive.append(name)
                block.statements[index + 1:index + 1] = [
                    _set_dirty(name, "true"),
                    ExpressionStatement(expression=call(VariableExpression(name=self._update_routine_name()))),
                ]
                index += 2
            index += 1

    def _update_routine_name(self) -> str:
        if self._update_name is None:
            self._update_name = self.scopes.next_identifier(ScopeKind.FILE, UPDATE_ROUTINE)
        return self._update_name

    def _update_routine(self) -> FunctionStatement:
        guards = []
        for name in self.reactive:
            body = Block()
            for node in self.graph:
                for attribute in node.attributes:
                    if name in attribute.scoped_variable_names:
                        body.statements.extend(attribute.set_statements)
            body.statements.append(_set_dirty(name, "false"))
            guards.append(
                IfStatement(
                    condition=BinaryExpression(left=_dirty_flag(name), operator="=", right=LiteralExpression(text="true")),
                    then_branch=body,
                )
            )
        return FunctionStatement(
            name=self._update_routine_name(),
            func=FunctionExpression(kind="sub", body=Block(statements=guards)),
        )
