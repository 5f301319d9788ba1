# Semantic Analyzer

import logging

from . import types
from .diagnostics import Diagnostic
from .parser import RELATIONAL_OPERATORS, NodeKind
from .symbols import Column, SymbolTable

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = ", ".join(types.VALID_TYPES)


def literal_type(node):
    """Type of a literal node; UNKNOWN for anything that is not a literal."""
    if node.kind == NodeKind.NUMBER:
        return types.number_type(node.text)
    if node.kind == NodeKind.STRING:
        return types.TEXT
    if node.kind == NodeKind.BOOLEAN_LITERAL:
        return types.BOOLEAN
    if node.kind == NodeKind.KEYWORD and node.text.upper() == "NULL":
        return types.NULL
    return types.UNKNOWN


class SemanticAnalyzer:
    """
    Two passes over a parse tree.

    The first pass registers every CREATE TABLE found anywhere in the tree,
    so statements may reference tables declared after them. The second pass
    validates SELECT / INSERT / UPDATE / DELETE statements against that
    catalog. Problems are collected as diagnostics; nodes are annotated with
    their type and, where resolved, a symbol reference.
    """

    def __init__(self):
        self.symbol_table = SymbolTable()
        self.errors = []

    def error(self, message, node):
        self.errors.append(Diagnostic(node.line, node.col, message))

    def has_errors(self):
        return bool(self.errors)

    def analyze(self, root):
        """Analyze root in place. Returns (root, symbol table, semantic errors)."""
        self.symbol_table = SymbolTable()
        self.errors = []

        if root is None:
            return root, self.symbol_table, self.errors

        for node in root.walk():
            if node.kind == NodeKind.CREATE_STATEMENT:
                self.analyze_create(node)

        handlers = {
            NodeKind.SELECT_STATEMENT: self.analyze_select,
            NodeKind.INSERT_STATEMENT: self.analyze_insert,
            NodeKind.UPDATE_STATEMENT: self.analyze_update,
            NodeKind.DELETE_STATEMENT: self.analyze_delete,
        }
        for node in root.walk():
            handler = handlers.get(node.kind)
            if handler is not None:
                handler(node)

        logger.debug("catalog has %d tables, %d semantic errors",
                     len(self.symbol_table), len(self.errors))
        return root, self.symbol_table, self.errors

    # Pass 1: catalog

    def analyze_create(self, node):
        try:
            self.register_table(node)
        except Exception as exc:
            # Contained to this statement; later statements are still analyzed
            logger.exception("CREATE TABLE at line %s could not be processed", node.line)
            self.error(f"Error processing CREATE TABLE: {exc}", node)

    def register_table(self, node):
        name_node = node.find(NodeKind.IDENTIFIER)
        if name_node is None:
            self.error("CREATE TABLE missing table name", node)
            return

        table_name = name_node.text
        name_node.annotate(types.TABLE, table_name)

        if self.symbol_table.table_exists(table_name):
            self.error(f"Table '{table_name}' already exists", name_node)
            return

        field_list = node.find(NodeKind.FIELD_LIST)
        if field_list is None:
            self.error(f"CREATE TABLE '{table_name}' missing field list", name_node)
            return

        columns = []
        seen = set()
        for field in field_list.find_all(NodeKind.FIELD_DEFINITION):
            col_node = field.find(NodeKind.IDENTIFIER)
            type_node = field.find(NodeKind.TYPE)
            if col_node is None or type_node is None:
                continue

            col_type = type_node.text.upper()
            if not types.is_valid_type(col_type):
                self.error(
                    f"Invalid data type '{type_node.text}' in table '{table_name}'. "
                    f"Supported types: {SUPPORTED_TYPES}",
                    type_node,
                )
                continue

            if col_node.text.lower() in seen:
                self.error(f"Duplicate column '{col_node.text}' in table '{table_name}'", col_node)
                continue
            seen.add(col_node.text.lower())

            col_node.annotate(col_type, f"{table_name}.{col_node.text}")
            type_node.annotate(types.TYPE)
            columns.append(Column(col_node.text, col_type))

        if columns:
            self.symbol_table.add_table(table_name, columns)

    # Pass 2: statements

    def resolve_table(self, stmt):
        """Annotate the statement's table name and return its Table, or None."""
        table_node = stmt.find(NodeKind.IDENTIFIER)
        if table_node is None:
            return None
        table = self.symbol_table.get_table(table_node.text)
        if table is None:
            table_node.annotate(types.UNKNOWN)
            self.error(f"Table '{table_node.text}' does not exist", table_node)
            return None
        table_node.annotate(types.TABLE, table.name)
        return table

    def resolve_column(self, node, table):
        """Check that identifier node names a column of table; annotate and return its type."""
        column = table.get_column(node.text)
        if column is None:
            node.annotate(types.UNKNOWN)
            self.error(f"Column '{node.text}' does not exist in table '{table.name}'", node)
            return types.UNKNOWN
        node.annotate(column.data_type, f"{table.name}.{column.name}")
        return column.data_type

    def expression_type(self, node, table):
        if node.kind == NodeKind.IDENTIFIER:
            return self.resolve_column(node, table)
        if node.kind == NodeKind.CONDITION:
            self.analyze_condition(node, table)
            return types.BOOLEAN
        value_type = literal_type(node)
        node.annotate(value_type)
        return value_type

    def analyze_select(self, node):
        table = self.resolve_table(node)
        if table is None:
            return

        select_list = node.find(NodeKind.SELECT_LIST)
        if select_list is not None:
            for col_node in select_list.find_all(NodeKind.IDENTIFIER):
                self.resolve_column(col_node, table)

        where_node = node.find(NodeKind.WHERE_CLAUSE)
        if where_node is not None:
            self.analyze_where(where_node, table)

        order_node = node.find(NodeKind.ORDER_CLAUSE)
        if order_node is not None:
            for col_node in order_node.find_all(NodeKind.IDENTIFIER):
                self.resolve_column(col_node, table)

    def analyze_insert(self, node):
        table = self.resolve_table(node)
        if table is None:
            return

        value_list = node.find(NodeKind.VALUE_LIST)
        if value_list is None:
            return

        values = [child for child in value_list.children if child.kind != NodeKind.DELIMITER]
        if len(values) != len(table.columns):
            self.error(
                f"INSERT INTO '{table.name}' expects {len(table.columns)} values "
                f"but got {len(values)}",
                node.find(NodeKind.IDENTIFIER),
            )
            return

        for value_node, column in zip(values, table.columns):
            expected_type = column.data_type
            if value_node.kind == NodeKind.IDENTIFIER:
                # A bare word in VALUES never refers to a column
                value_node.annotate(types.UNKNOWN)
                if expected_type == types.TEXT:
                    self.error(
                        f"Invalid value '{value_node.text}' for column '{column.name}'. "
                        "String literals must be enclosed in single quotes.",
                        value_node,
                    )
                else:
                    self.error(
                        f"Type mismatch in INSERT. Column '{column.name}' expects "
                        f"{expected_type} but got {types.IDENTIFIER}",
                        value_node,
                    )
                continue

            actual_type = self.expression_type(value_node, table)
            if not types.compatible(expected_type, actual_type):
                self.error(
                    f"Type mismatch in INSERT. Column '{column.name}' expects "
                    f"{expected_type} but got {actual_type}",
                    value_node,
                )

    def analyze_update(self, node):
        table = self.resolve_table(node)
        if table is None:
            return

        assignments = node.find(NodeKind.ASSIGNMENT_LIST)
        if assignments is not None:
            for assign in assignments.find_all(NodeKind.ASSIGNMENT):
                self.analyze_assignment(assign, table)

        where_node = node.find(NodeKind.WHERE_CLAUSE)
        if where_node is not None:
            self.analyze_where(where_node, table)

    def analyze_assignment(self, assign, table):
        col_node = assign.children[0] if assign.children else None
        if col_node is None or col_node.kind != NodeKind.IDENTIFIER:
            return
        if not table.has_column(col_node.text):
            self.resolve_column(col_node, table)
            return

        expected_type = self.resolve_column(col_node, table)
        if len(assign.children) < 3:
            return

        value_node = assign.children[-1]
        actual_type = self.expression_type(value_node, table)
        if not types.compatible(expected_type, actual_type):
            self.error(
                f"Type mismatch in UPDATE. Column '{col_node.text}' expects "
                f"{expected_type} but got {actual_type}",
                value_node,
            )

    def analyze_delete(self, node):
        table = self.resolve_table(node)
        if table is None:
            return

        where_node = node.find(NodeKind.WHERE_CLAUSE)
        if where_node is not None:
            self.analyze_where(where_node, table)

    # Conditions

    def analyze_where(self, where_node, table):
        # children[0] is the WHERE keyword itself
        for child in where_node.children[1:]:
            self.expression_type(child, table)

    def analyze_condition(self, root, table):
        # AND/OR chains are left-deep, so walk them with a stack
        stack = [root]
        while stack:
            node = stack.pop()
            if node.kind != NodeKind.CONDITION:
                self.expression_type(node, table)
                continue

            node.annotate(types.BOOLEAN)
            if node.text in RELATIONAL_OPERATORS and len(node.children) == 3:
                left, op, right = node.children
                left_type = self.expression_type(left, table)
                right_type = self.expression_type(right, table)
                if not types.compatible(left_type, right_type):
                    self.error(
                        f"Type mismatch in WHERE clause. Cannot compare {left_type} with {right_type}",
                        op,
                    )
                continue

            stack.extend(
                child for child in reversed(node.children) if child.kind != NodeKind.OPERATOR
            )


def analyze(root):
    """Analyze a parse tree. Returns (annotated tree, symbol table, semantic errors)."""
    return SemanticAnalyzer().analyze(root)
