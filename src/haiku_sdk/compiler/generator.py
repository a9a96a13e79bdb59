"""
Haiku Code Generator
====================

Turns a ProgramAst into the routines of a SceneGraph component.

Generation Order
----------------
1. The <script> block is parsed first. Top-level ``sub``/``function``
   declarations become file-level routines; every other statement goes
   into ``init``. Names the script declares (local variables, first-level
   ``m.<name>`` fields, routine names) are registered in the Init scope
   before any node identifier is allocated, so generated names never
   collide with them.
2. Nodes are created in document order. For each node: construction,
   plain attributes, observers, flags, then its children, then the
   ``appendChild`` that mounts it on its parent.
3. The reactivity pass (haiku_sdk.compiler.reactivity) rewrites the
   routines for attributes bound to variables that change later.

Example
-------
``<Label text="hello"/>`` generates::

    sub init()
        label = CreateObject("roSGNode", "Label")
        label.text = "hello"
        m.top.appendChild(label)
    end sub

Node identifiers are ScopedVariables shared by every statement that
mentions the node. Nodes with observers start out in instance scope
(``m.button``); the reactivity pass may promote more of them.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from haiku_sdk.brs import (
    RESERVED_INSTANCE_FIELDS,
    assigned_name,
    instance_target,
    parse_expression,
    parse_script,
)
from haiku_sdk.brs.ast import (
    INSTANCE_ROOT,
    AssignmentStatement,
    Block,
    DottedGetExpression,
    DottedSetStatement,
    Expression,
    ExpressionStatement,
    FunctionExpression,
    FunctionStatement,
    LiteralExpression,
    ScopedVariable,
    ScopedVariableExpression,
    Statement,
    VariableExpression,
    call,
    dotted,
    string_literal,
)
from haiku_sdk.compiler.ast import AttributeAst, AttributeKind, NodeAst, ProgramAst, ValueKind
from haiku_sdk.compiler.errors import TemplateSemanticError
from haiku_sdk.compiler.interpolation import interpolate
from haiku_sdk.compiler.reactivity import DependencyAttribute, DependencyNode, ReactivityPass
from haiku_sdk.compiler.scopes import ScopeKind, ScopeTable

logger = logging.getLogger(__name__)

INIT_ROUTINE = "init"
FOCUS_FLAG = "focus"
FOCUS_ROUTINE = "__set_initial_focus__"
FOCUS_TEMPORARY_ID = "__initial_focus__"
HANDLER_PREFIX = "__handle_"


# =============================================================================
# Generation Results
# =============================================================================

@dataclass
class ScriptResult:
    """
    The <script> block, split for generation.

    Attributes:
        statements: Statements that run in ``init``
        callables: Top-level routine declarations
        declared_names: Local variables and first-level ``m.`` fields assigned
        declared_callable_names: Names of the declared routines
    """
    statements: list[Statement] = field(default_factory=list)
    callables: list[FunctionStatement] = field(default_factory=list)
    declared_names: list[str] = field(default_factory=list)
    declared_callable_names: list[str] = field(default_factory=list)


@dataclass
class NodeResult:
    statements: list[Statement] = field(default_factory=list)
    callables: list[FunctionStatement] = field(default_factory=list)


@dataclass
class GeneratedComponent:
    """
    Everything generated for one component, still as BrightScript AST.

    Attributes:
        init: The init routine, or None when there is nothing to initialize
        script_callables: Routines declared in the <script> block
        node_callables: Observer handlers and the focus routine
        update: The reactivity update routine, if any variable is reactive
        public_functions: Routine names exported through <interface>
        graph: Dependency graph built during generation
    """
    init: Optional[FunctionStatement] = None
    script_callables: list[FunctionStatement] = field(default_factory=list)
    node_callables: list[FunctionStatement] = field(default_factory=list)
    update: Optional[FunctionStatement] = None
    public_functions: list[str] = field(default_factory=list)
    graph: list[DependencyNode] = field(default_factory=list)

    @property
    def routines(self) -> list[FunctionStatement]:
        """All routines in output order."""
        routines = [self.init] if self.init is not None else []
        routines.extend(self.script_callables)
        routines.extend(self.node_callables)
        if self.update is not None:
            routines.append(self.update)
        return routines


# =============================================================================
# Code Generator
# =============================================================================

def identifier_base(node_name: str) -> str:
    """Lowercase variable name for a node type (``My.Poster`` -> ``my_poster``)."""
    return re.sub(r"[^a-z0-9_]", "_", node_name.lower())


class CodeGenerator:
    """
    Generates the routines of one component from its AST.

    A generator instance may be reused; all state is reset by generate().

    Attributes:
        filename: Source filename used in error messages
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._reset()

    def _reset(self) -> None:
        self.scopes = ScopeTable()
        self.graph: list[DependencyNode] = []
        self.public_functions: list[str] = []
        self._focus_assigned = False

    def generate(self, program: ProgramAst) -> GeneratedComponent:
        """
        Generate the component routines.

        Raises:
            ScriptSyntaxError: If the script or a binding is not valid BrightScript
            TemplateSemanticError: If the script declares ``init`` while nodes need one
            InternalCompilerError: If the reactivity pass finds a broken invariant
        """
        self._reset()

        # Script names must be registered before any node identifier is allocated.
        script = self.absorb_script(program.script, program.script_line)

        node_statements: list[Statement] = []
        node_callables: list[FunctionStatement] = []
        for node in program.nodes:
            result = self.create_object(node, None)
            node_statements.extend(result.statements)
            node_callables.extend(result.callables)

        component = GeneratedComponent(
            script_callables=script.callables,
            node_callables=node_callables,
            public_functions=self.public_functions,
            graph=self.graph,
        )

        init_statements = script.statements + node_statements
        if init_statements:
            if any(name.lower() == INIT_ROUTINE for name in script.declared_callable_names):
                raise TemplateSemanticError(
                    f"the <script> block declares '{INIT_ROUTINE}', which is generated for this component",
                    hint=f"move the body of '{INIT_ROUTINE}' to the top level of the <script> block",
                )
            component.init = FunctionStatement(
                name=INIT_ROUTINE,
                func=FunctionExpression(kind="sub", body=Block(statements=init_statements)),
            )

        component.update = ReactivityPass(self.graph, self.scopes).run(
            component.init, [*component.script_callables, *component.node_callables]
        )
        return component

    # =========================================================================
    # Script Block
    # =========================================================================

    def absorb_script(self, source: str, line_number: int = 1) -> ScriptResult:
        """
        Parse the <script> block and register the names it declares.

        Raises:
            ScriptSyntaxError: If the script is malformed
        """
        result = ScriptResult()
        if not source.strip():
            self._register_reserved()
            return result

        for statement in parse_script(source, self.filename, line_number):
            if isinstance(statement, FunctionStatement):
                result.callables.append(statement)
                result.declared_callable_names.append(statement.name)
                continue

            result.statements.append(statement)
            name = assigned_name(statement) or instance_target(statement)
            if name is not None and name not in result.declared_names:
                result.declared_names.append(name)

        self._register_reserved()
        for name in result.declared_names:
            self.scopes.register(ScopeKind.INIT, name)
        for name in result.declared_callable_names:
            self.scopes.register(ScopeKind.INIT, name)
            self.scopes.register(ScopeKind.FILE, name)

        logger.debug(
            f"script: {len(result.statements)} init statements, "
            f"{len(result.callables)} routines, declares {result.declared_names}"
        )
        return result

    def _register_reserved(self) -> None:
        self.scopes.register(ScopeKind.INIT, INSTANCE_ROOT)
        for name in sorted(RESERVED_INSTANCE_FIELDS):
            self.scopes.register(ScopeKind.INIT, name)

    # =========================================================================
    # Nodes
    # =========================================================================

    def create_object(self, node: NodeAst, parent: Optional[ScopedVariable]) -> NodeResult:
        """
        Generate construction, configuration and mounting of ``node``.

        Args:
            node: The node to create
            parent: The parent node's variable, or None to mount on ``m.top``
        """
        observables = node.attributes_of(AttributeKind.OBSERVABLE)
        variable = ScopedVariable(
            name=self.scopes.next_identifier(ScopeKind.INIT, identifier_base(node.name)),
            instance=bool(observables),
        )
        graph_node = DependencyNode(variable=variable)
        self.graph.append(graph_node)

        result = NodeResult()
        result.statements.append(
            AssignmentStatement(
                target=self._ref(variable),
                value=call(
                    VariableExpression(name="CreateObject"),
                    string_literal("roSGNode"),
                    string_literal(node.name),
                ),
            )
        )

        node_id_image = None
        for attribute in node.attributes_of(AttributeKind.PLAIN):
            statements = self._plain_attribute(variable, attribute)
            if attribute.name == "id" and attribute.value.kind == ValueKind.STRING_LITERAL:
                node_id_image = attribute.value.image
            result.statements.extend(statements)
            graph_node.attributes.append(DependencyAttribute.from_statements(attribute.name, statements))

        for attribute in observables:
            self._observable_attribute(variable, attribute, result)

        for attribute in node.attributes_of(AttributeKind.FLAG):
            self._flag_attribute(node, variable, attribute, node_id_image, result)

        for child in node.children:
            child_result = self.create_object(child, variable)
            result.statements.extend(child_result.statements)
            result.callables.extend(child_result.callables)

        parent_expr = dotted(INSTANCE_ROOT, "top") if parent is None else self._ref(parent)
        result.statements.append(
            ExpressionStatement(
                expression=call(DottedGetExpression(obj=parent_expr, name="appendChild"), self._ref(variable))
            )
        )
        return result

    def _ref(self, variable: ScopedVariable) -> ScopedVariableExpression:
        return ScopedVariableExpression(variable=variable)

    def _plain_attribute(self, variable: ScopedVariable, attribute: AttributeAst) -> list[Statement]:
        value = attribute.value
        if value.kind == ValueKind.DATA_BINDING:
            expression = parse_expression(value.inner, self.filename, attribute.line)
            return [DottedSetStatement(obj=self._ref(variable), name=attribute.name, value=expression)]

        if attribute.name == "id":
            return [DottedSetStatement(obj=self._ref(variable), name="id", value=LiteralExpression(text=value.image))]

        return interpolate(
            self._ref(variable),
            attribute.name,
            value.image,
            self.scopes,
            self.filename,
            attribute.line,
        )

    def _observable_attribute(self, variable: ScopedVariable, attribute: AttributeAst, result: NodeResult) -> None:
        observed_field = attribute.field_name
        value = attribute.value

        if value.kind == ValueKind.STRING_LITERAL:
            handler: Expression = LiteralExpression(text=value.image)
        else:
            expression = parse_expression(value.inner, self.filename, attribute.line)
            if isinstance(expression, FunctionExpression):
                name = self.scopes.next_identifier(
                    ScopeKind.FILE, f"{HANDLER_PREFIX}{variable.name}_{observed_field}"
                )
                result.callables.append(FunctionStatement(location=expression.location, name=name, func=expression))
                handler = string_literal(name)
            else:
                handler = expression

        result.statements.append(
            ExpressionStatement(
                expression=call(
                    DottedGetExpression(obj=self._ref(variable), name="observeField"),
                    string_literal(observed_field),
                    handler,
                )
            )
        )

    def _flag_attribute(
        self,
        node: NodeAst,
        variable: ScopedVariable,
        attribute: AttributeAst,
        node_id_image: Optional[str],
        result: NodeResult,
    ) -> None:
        if attribute.field_name != FOCUS_FLAG:
            logger.warning(f"{self.filename}:{attribute.line}: ignoring unknown flag '{attribute.name}' on <{node.name}>")
            return
        if not attribute.enabled:
            return
        if self._focus_assigned:
            logger.warning(
                f"{self.filename}:{attribute.line}: initial focus is already set; ignoring '{attribute.name}' on <{node.name}>"
            )
            return

        if variable.instance:
            body = [
                ExpressionStatement(
                    expression=call(DottedGetExpression(obj=self._ref(variable), name="setFocus"), LiteralExpression(text="true"))
                )
            ]
        elif node_id_image is not None:
            find_node = call(dotted(INSTANCE_ROOT, "top", "findNode"), LiteralExpression(text=node_id_image))
            body = [
                ExpressionStatement(
                    expression=call(DottedGetExpression(obj=find_node, name="setFocus"), LiteralExpression(text="true"))
                )
            ]
        else:
            result.statements.append(
                DottedSetStatement(obj=self._ref(variable), name="id", value=string_literal(FOCUS_TEMPORARY_ID))
            )
            body = [
                AssignmentStatement(
                    target=VariableExpression(name="node"),
                    value=call(dotted(INSTANCE_ROOT, "top", "findNode"), string_literal(FOCUS_TEMPORARY_ID)),
                ),
                DottedSetStatement(obj=VariableExpression(name="node"), name="id", value=LiteralExpression(text="invalid")),
                ExpressionStatement(
                    expression=call(dotted("node", "setFocus"), LiteralExpression(text="true"))
                ),
            ]

        name = self.scopes.next_identifier(ScopeKind.FILE, FOCUS_ROUTINE)
        result.callables.append(
            FunctionStatement(name=name, func=FunctionExpression(kind="sub", body=Block(statements=body)))
        )
        self.public_functions.append(name)
        self._focus_assigned = True
