"""Rewrite a relational SELECT into CQL.

Only a narrow subset of SELECT has a CQL counterpart: a single table, no
joins or grouping, and simple projections and predicates. Anything else
raises :class:`UnsupportedConstructError`, and the caller keeps the
original text as native CQL.
"""

from typing import Callable, Dict, List, Optional

from sqlglot import exp

from ..errors import UnsupportedConstructError

# Select clauses CQL cannot express
UNSUPPORTED_CLAUSES = (
    "into",
    "group",
    "having",
    "joins",
    "with",
    "windows",
    "qualify",
    "laterals",
    "connect",
    "match",
    "pivots",
    "sample",
)

# Row counts left for the caller to bind
BIND_MARKERS = (exp.Placeholder, exp.Parameter)


class SqlToCqlRewriter:
    """Translate a parsed SELECT into the CQL subset.

    Expression nodes are dispatched on their exact sqlglot type. Types
    missing from the dispatch table are unsupported.
    """

    def __init__(self, row_limit: int, no_limit: bool = False):
        """Initialize rewriter.

        Args:
            row_limit: Limit injected into unbounded queries, 0 to disable
            no_limit: Drop any LIMIT clause instead
        """
        self.row_limit = row_limit
        self.no_limit = no_limit
        self._handlers: Dict[type, Callable[[exp.Expression], None]] = {
            exp.Column: self._rewrite_column,
            exp.Star: self._rewrite_leaf,
            exp.Literal: self._rewrite_leaf,
            exp.Null: self._rewrite_leaf,
            exp.Boolean: self._rewrite_leaf,
            exp.Placeholder: self._rewrite_leaf,
            exp.Parameter: self._rewrite_leaf,
            exp.Alias: self._rewrite_wrapper,
            exp.Paren: self._rewrite_wrapper,
            exp.Neg: self._rewrite_wrapper,
            exp.Ordered: self._rewrite_wrapper,
            exp.Add: self._rewrite_binary,
            exp.Sub: self._rewrite_binary,
            exp.Mul: self._rewrite_binary,
            exp.Div: self._rewrite_binary,
            exp.EQ: self._rewrite_binary,
            exp.NEQ: self._rewrite_binary,
            exp.GT: self._rewrite_binary,
            exp.GTE: self._rewrite_binary,
            exp.LT: self._rewrite_binary,
            exp.LTE: self._rewrite_binary,
            exp.And: self._rewrite_binary,
            exp.In: self._rewrite_in,
            exp.Anonymous: self._rewrite_function,
            exp.Count: self._rewrite_count,
        }

    def rewrite(self, ast: exp.Expression) -> exp.Expression:
        """Return a rewritten copy of ``ast``.

        Raises:
            UnsupportedConstructError: when the statement has no CQL form
        """
        if not isinstance(ast, exp.Select):
            raise UnsupportedConstructError(
                f"Only plain SELECT statements can be translated, got {type(ast).__name__}"
            )
        rewritten = ast.copy()
        self._rewrite_select(rewritten)
        return rewritten

    def _rewrite_select(self, select: exp.Select) -> None:
        """Rewrite the clauses of a SELECT in place."""
        self._check_clauses(select)
        has_source = self._rewrite_from(select)
        select.set("expressions", self._rewrite_projections(select.expressions))

        where = select.args.get("where")
        if where is not None:
            self._rewrite_expression(where.this)

        order = select.args.get("order")
        if order is not None:
            for ordered in order.expressions:
                self._rewrite_expression(ordered)

        if has_source:
            self._apply_limit(select)

    def _check_clauses(self, select: exp.Select) -> None:
        for clause in UNSUPPORTED_CLAUSES:
            if select.args.get(clause):
                raise UnsupportedConstructError(f"Unsupported clause: {clause}")
        distinct = select.args.get("distinct")
        if distinct is not None and distinct.args.get("on") is not None:
            raise UnsupportedConstructError("Unsupported clause: distinct on")
        if not select.expressions:
            raise UnsupportedConstructError("SELECT without projections")

    def _rewrite_from(self, select: exp.Select) -> bool:
        """Validate the single table source and drop its alias."""
        from_clause = select.args.get("from")
        if from_clause is None:
            return False
        table = from_clause.this
        if not isinstance(table, exp.Table):
            raise UnsupportedConstructError(
                f"Unsupported source: {type(table).__name__}"
            )
        if not isinstance(table.this, exp.Identifier):
            raise UnsupportedConstructError("Table functions are not supported")
        if table.args.get("alias") is not None:
            table.set("alias", None)
        return True

    def _rewrite_projections(self, expressions: List[exp.Expression]) -> List[exp.Expression]:
        rewritten: List[exp.Expression] = []
        for expression in expressions:
            if self._is_qualified_star(expression):
                rewritten.append(exp.Star())
                continue
            self._rewrite_expression(expression)
            rewritten.append(expression)
        return rewritten

    def _is_qualified_star(self, expression: exp.Expression) -> bool:
        if not isinstance(expression, exp.Column):
            return False
        return isinstance(expression.this, exp.Star)

    def _apply_limit(self, select: exp.Select) -> None:
        """Remove, keep or inject the row limit.

        OFFSET has no native form and is always cleared. A bind marker row
        count is kept so the statement still takes the caller's parameters.
        """
        select.set("offset", None)
        if self.no_limit:
            select.set("limit", None)
            return

        limit = select.args.get("limit")
        if self._has_row_count(limit):
            limit.set("offset", None)
            return

        if self.row_limit > 0:
            select.set("limit", exp.Limit(expression=exp.Literal.number(self.row_limit)))
        else:
            select.set("limit", None)

    def _has_row_count(self, limit: Optional[exp.Expression]) -> bool:
        """Whether ``limit`` carries a positive literal or a bind marker."""
        if not isinstance(limit, exp.Limit):
            return False
        count = limit.expression
        if isinstance(count, BIND_MARKERS):
            return True
        if not isinstance(count, exp.Literal) or count.is_string:
            return False
        try:
            return int(count.this) > 0
        except ValueError:
            return False

    def _rewrite_expression(self, node: exp.Expression) -> None:
        handler = self._handlers.get(type(node))
        if handler is None:
            raise UnsupportedConstructError(f"Unsupported expression: {type(node).__name__}")
        handler(node)

    def _rewrite_leaf(self, node: exp.Expression) -> None:
        return None

    def _rewrite_column(self, column: exp.Column) -> None:
        """Strip table, schema and catalog qualifiers."""
        for part in ("table", "db", "catalog"):
            if column.args.get(part) is not None:
                column.set(part, None)

    def _rewrite_wrapper(self, node: exp.Expression) -> None:
        self._rewrite_expression(node.this)

    def _rewrite_binary(self, node: exp.Binary) -> None:
        self._rewrite_expression(node.left)
        self._rewrite_expression(node.right)

    def _rewrite_in(self, node: exp.In) -> None:
        if node.args.get("query") is not None:
            raise UnsupportedConstructError("IN with a subquery")
        self._rewrite_expression(node.this)
        for value in node.expressions:
            self._rewrite_expression(value)

    def _rewrite_function(self, node: exp.Anonymous) -> None:
        for argument in node.expressions:
            self._rewrite_expression(argument)

    def _rewrite_count(self, node: exp.Count) -> None:
        argument = node.this
        if argument is None:
            return
        self._rewrite_expression(argument)
