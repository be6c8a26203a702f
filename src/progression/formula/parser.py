"""Formula parser for the progression engine.

Parses prepared formula expressions into an AST using the Lark parser.
"""

from dataclasses import dataclass
from typing import Any

from lark import Lark, v_args
from lark.exceptions import (
    LarkError,
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedToken,
    VisitError,
)
from lark.visitors import Transformer_NonRecursive

from progression.core.exceptions import (
    FormulaError,
    FormulaNestingError,
    FormulaSyntaxError,
    MalformedNumberError,
)
from progression.formula.grammar import FORMULA_GRAMMAR


# AST Node types
@dataclass(frozen=True)
class NumberNode:
    value: float


@dataclass(frozen=True)
class NameNode:
    name: str


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    arguments: tuple[Any, ...]


@dataclass(frozen=True)
class OperatorChainNode:
    """
    Operands joined by operators of one precedence level.

    ``+ - * /`` chains fold left to right; a ``^`` chain folds right to left.
    """

    operands: tuple[Any, ...]
    operators: tuple[str, ...]


@dataclass(frozen=True)
class UnaryOpNode:
    operator: str
    operand: Any


def _chain(items: list[Any]) -> OperatorChainNode:
    """Split ``[operand, op, operand, op, ...]`` into operands and operators."""
    return OperatorChainNode(tuple(items[0::2]), tuple(str(op) for op in items[1::2]))


class FormulaTransformer(Transformer_NonRecursive):
    """Transform Lark parse tree into AST nodes without recursing on depth."""

    @v_args(inline=True)
    def number(self, token):
        text = str(token)
        try:
            return NumberNode(float(text))
        except ValueError:
            raise MalformedNumberError(text) from None

    @v_args(inline=True)
    def name(self, token):
        return NameNode(str(token))

    def function_call(self, items):
        return FunctionCallNode(str(items[0]), tuple(items[1]))

    def arguments(self, items):
        return list(items)

    # Operator chains
    def add_chain(self, items):
        return _chain(items)

    def mul_chain(self, items):
        return _chain(items)

    def pow_chain(self, items):
        return _chain(items)

    # Unary operators
    @v_args(inline=True)
    def neg(self, _sign, operand):
        return UnaryOpNode("-", operand)

    @v_args(inline=True)
    def pos(self, _sign, operand):
        return operand  # Positive is a no-op


def _describe(error: LarkError) -> str:
    """Short, single-line description of a Lark parse failure."""
    if isinstance(error, UnexpectedCharacters):
        return f"unexpected character '{error.char}' at column {error.column}"
    if isinstance(error, UnexpectedEOF):
        return "unexpected end of expression"
    if isinstance(error, UnexpectedToken):
        if error.token.type == "$END":
            return "unexpected end of expression"
        return f"unexpected '{error.token}' at column {error.column}"
    return str(error).splitlines()[0]


class FormulaParser:
    """
    Parser for prepared formula expressions.

    The LALR tables are built once per instance; ``parse`` keeps no state
    between calls, so one instance can be shared.
    """

    def __init__(self):
        self._parser = Lark(FORMULA_GRAMMAR, parser="lalr")
        self._transformer = FormulaTransformer()

    def parse(self, expression: str) -> Any:
        """
        Parse an expression into an AST.

        Args:
            expression: Expression text

        Returns:
            AST root node

        Raises:
            FormulaSyntaxError: If the expression is structurally invalid
            MalformedNumberError: If a numeric literal cannot be read
            FormulaNestingError: If the expression nests too deeply to build
        """
        try:
            tree = self._parser.parse(expression)
        except LarkError as e:
            raise FormulaSyntaxError(expression, _describe(e)) from e
        except RecursionError:
            raise FormulaNestingError() from None

        try:
            return self._transformer.transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, FormulaError):
                raise e.orig_exc from None
            if isinstance(e.orig_exc, RecursionError):
                raise FormulaNestingError() from None
            raise

    def get_names(self, expression: str) -> list[str]:
        """
        Extract the bare names and function names left in an expression.

        Args:
            expression: Expression text

        Returns:
            List of names, functions included, without duplicates
        """
        ast = self.parse(expression)
        names: list[str] = []
        try:
            self._collect_names(ast, names)
        except RecursionError:
            raise FormulaNestingError() from None
        return list(dict.fromkeys(names))

    def _collect_names(self, node: Any, names: list[str]) -> None:
        """Recursively collect names from the AST."""
        if isinstance(node, NameNode):
            names.append(node.name)
        elif isinstance(node, OperatorChainNode):
            for operand in node.operands:
                self._collect_names(operand, names)
        elif isinstance(node, UnaryOpNode):
            self._collect_names(node.operand, names)
        elif isinstance(node, FunctionCallNode):
            names.append(node.name)
            for arg in node.arguments:
                self._collect_names(arg, names)


_shared_parser: FormulaParser | None = None


def get_parser() -> FormulaParser:
    """Return the process-wide parser, building it on first use."""
    global _shared_parser
    if _shared_parser is None:
        _shared_parser = FormulaParser()
    return _shared_parser
