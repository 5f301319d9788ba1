# Syntax Parser

import logging
from enum import Enum

from .config import DEFAULT_MAX_DEPTH
from .diagnostics import Diagnostic
from .lexer import STATEMENT_KEYWORDS, Token, TokenKind, describe_error
from .types import VALID_TYPES

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    PROGRAM = "Program"
    CREATE_STATEMENT = "CreateStatement"
    SELECT_STATEMENT = "SelectStatement"
    INSERT_STATEMENT = "InsertStatement"
    UPDATE_STATEMENT = "UpdateStatement"
    DELETE_STATEMENT = "DeleteStatement"
    FIELD_LIST = "FieldList"
    FIELD_DEFINITION = "FieldDefinition"
    SELECT_LIST = "SelectList"
    VALUE_LIST = "ValueList"
    ASSIGNMENT_LIST = "AssignmentList"
    ASSIGNMENT = "Assignment"
    WHERE_CLAUSE = "WhereClause"
    ORDER_CLAUSE = "OrderClause"
    CONDITION = "Condition"
    IDENTIFIER = "Identifier"
    TYPE = "Type"
    NUMBER = "Number"
    STRING = "String"
    OPERATOR = "Operator"
    DELIMITER = "Delimiter"
    KEYWORD = "Keyword"
    BOOLEAN_LITERAL = "BooleanLiteral"
    ERROR = "Error"


STATEMENT_KINDS = {
    NodeKind.CREATE_STATEMENT,
    NodeKind.SELECT_STATEMENT,
    NodeKind.INSERT_STATEMENT,
    NodeKind.UPDATE_STATEMENT,
    NodeKind.DELETE_STATEMENT,
}

RELATIONAL_OPERATORS = {"=", "<>", "!=", "<", ">", "<=", ">=", "LIKE"}


class ParseTreeNode:
    def __init__(self, kind, text="", line=None, col=None):
        self.children = []
        self.kind = kind
        self.text = text
        self.line = line
        self.col = col
        # Filled in by the semantic analyzer
        self.data_type = None
        self.symbol_ref = None

    def add_child(self, node):
        self.children.append(node)
        return node

    def annotate(self, data_type, symbol_ref=None):
        self.data_type = data_type
        if symbol_ref is not None:
            self.symbol_ref = symbol_ref

    def find(self, kind):
        """First direct child of the given kind, or None."""
        for child in self.children:
            if child.kind == kind:
                return child
        return None

    def find_all(self, kind):
        return [child for child in self.children if child.kind == kind]

    def walk(self):
        """Pre-order depth-first iteration over this node and all descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def _fields(self):
        return {
            "kind": self.kind.value,
            "lexeme": self.text,
            "line": self.line,
            "column": self.col,
            "dataType": self.data_type,
            "symbolRef": self.symbol_ref,
            "children": [],
        }

    def to_dict(self):
        """Nested dict view of the subtree, built without recursion."""
        result = self._fields()
        stack = [(self, result)]
        while stack:
            node, data = stack.pop()
            for child in node.children:
                child_data = child._fields()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return result

    def __repr__(self):
        if self.text:
            return f"{self.kind.value}({self.text!r})"
        return self.kind.value


def describe_token(token):
    if token.kind == TokenKind.EOF:
        return "end of input"
    if token.kind == TokenKind.ERROR:
        return describe_error(token)
    return f"'{token.lexeme}'"


class Parser:
    def __init__(self, tokens, max_depth=DEFAULT_MAX_DEPTH):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != TokenKind.EOF:
            last = self.tokens[-1] if self.tokens else None
            self.tokens.append(Token(
                TokenKind.EOF, "",
                last.line if last else 1,
                last.column if last else 1,
            ))
        self.current = 0
        self.errors = []
        self.panic = False
        self.max_depth = max_depth
        self.depth = 0

    @property
    def had_error(self):
        return bool(self.errors)

    # Token helpers

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1] if self.current > 0 else None

    def is_at_end(self):
        return self.peek().kind == TokenKind.EOF

    def advance(self):
        token = self.peek()
        if not self.is_at_end():
            self.current += 1
        return token

    def check(self, kind, lexeme=None):
        token = self.peek()
        if token.kind != kind:
            return False
        return lexeme is None or token.lexeme.upper() == lexeme

    def match(self, kind, lexeme=None):
        """Consume and return the current token if it matches, else None."""
        if self.check(kind, lexeme):
            return self.advance()
        return None

    def at_statement_start(self):
        token = self.peek()
        return token.kind == TokenKind.KEYWORD and token.lexeme.upper() in STATEMENT_KEYWORDS

    # Error handling

    def error(self, message, token=None):
        """Record a syntax error at token (default: the current one) and enter panic mode."""
        token = token or self.peek()
        self.panic = True
        last = self.errors[-1] if self.errors else None
        if last is not None and (last.line, last.column) == (token.line, token.column):
            return
        self.errors.append(Diagnostic(
            token.line, token.column, f"{message}, found {describe_token(token)}"
        ))

    def synchronize(self):
        """Skip ahead to just past the next ';' or up to the next statement keyword."""
        self.panic = False
        if not self.at_statement_start():
            self.advance()
        while not self.is_at_end():
            prev = self.previous()
            if prev is not None and prev.kind == TokenKind.DELIMITER and prev.lexeme == ";":
                return
            if self.at_statement_start():
                return
            self.advance()

    def abandon(self, node):
        """Close a statement that hit a syntax error, keeping what was parsed so far."""
        token = self.peek()
        node.add_child(ParseTreeNode(NodeKind.ERROR, token.lexeme, token.line, token.column))
        return node

    # Node helpers

    def create_node(self, kind):
        token = self.peek()
        return ParseTreeNode(kind, "", token.line, token.column)

    def leaf(self, kind, token):
        return ParseTreeNode(kind, token.lexeme, token.line, token.column)

    def expect(self, parent, token_kind, lexeme, node_kind, message):
        token = self.match(token_kind, lexeme)
        if token is None:
            self.error(message)
            return None
        return parent.add_child(self.leaf(node_kind, token))

    def expect_keyword(self, parent, word, message):
        return self.expect(parent, TokenKind.KEYWORD, word, NodeKind.KEYWORD, message)

    def expect_delimiter(self, parent, ch, message):
        return self.expect(parent, TokenKind.DELIMITER, ch, NodeKind.DELIMITER, message)

    def expect_identifier(self, parent, message):
        return self.expect(parent, TokenKind.IDENTIFIER, None, NodeKind.IDENTIFIER, message)

    def nested(self, rule):
        """Run rule one nesting level deeper, refusing to go past max_depth."""
        if self.depth >= self.max_depth:
            self.error("Condition nested too deeply")
            return None
        self.depth += 1
        try:
            return rule()
        finally:
            self.depth -= 1

    # Grammar

    def parse_query(self):
        root = self.create_node(NodeKind.PROGRAM)
        while not self.is_at_end():
            stmt_node = self.parse_statement()
            if stmt_node is not None:
                root.add_child(stmt_node)
            if self.panic:
                self.synchronize()
        logger.debug("parsed %d statements with %d syntax errors",
                     len(root.children), len(self.errors))
        return root

    def parse_statement(self):
        token = self.peek()
        rules = {
            "CREATE": self.parse_create_stmt,
            "SELECT": self.parse_select_stmt,
            "INSERT": self.parse_insert_stmt,
            "UPDATE": self.parse_update_stmt,
            "DELETE": self.parse_delete_stmt,
        }
        rule = rules.get(token.lexeme.upper()) if token.kind == TokenKind.KEYWORD else None
        if rule is None:
            self.error("Expected statement (SELECT, INSERT, UPDATE, DELETE, CREATE)")
            return None
        return rule()

    def parse_create_stmt(self):
        node = self.create_node(NodeKind.CREATE_STATEMENT)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        if not self.expect_keyword(node, "TABLE", "Expected 'TABLE' after 'CREATE'"):
            return self.abandon(node)
        if not self.expect_identifier(node, "Expected table name"):
            return self.abandon(node)
        if not self.expect_delimiter(node, "(", "Expected '(' after table name"):
            return self.abandon(node)
        fields = self.parse_field_list()
        if fields is None:
            return self.abandon(node)
        node.add_child(fields)
        if not self.expect_delimiter(node, ")", "Expected ')' after field list"):
            return self.abandon(node)
        if not self.expect_delimiter(node, ";", "Expected ';' at end of statement"):
            return self.abandon(node)
        return node

    def parse_field_list(self):
        node = self.create_node(NodeKind.FIELD_LIST)
        while True:
            field = self.parse_field_def()
            if field is None:
                return None
            node.add_child(field)
            comma = self.match(TokenKind.DELIMITER, ",")
            if comma is None:
                break
            node.add_child(self.leaf(NodeKind.DELIMITER, comma))
        return node

    def parse_field_def(self):
        node = self.create_node(NodeKind.FIELD_DEFINITION)
        if not self.expect_identifier(node, "Expected column name"):
            return None
        # Unknown type names are let through as identifiers; the analyzer rejects them
        type_token = self.peek()
        is_type_keyword = (type_token.kind == TokenKind.KEYWORD
                           and type_token.lexeme.upper() in VALID_TYPES)
        if not is_type_keyword and type_token.kind != TokenKind.IDENTIFIER:
            self.error("Expected column type")
            return None
        node.add_child(self.leaf(NodeKind.TYPE, self.advance()))
        primary = self.match(TokenKind.KEYWORD, "PRIMARY")
        if primary is not None:
            node.add_child(self.leaf(NodeKind.KEYWORD, primary))
            if not self.expect_keyword(node, "KEY", "Expected 'KEY' after 'PRIMARY'"):
                return None
        return node

    def parse_select_stmt(self):
        node = self.create_node(NodeKind.SELECT_STATEMENT)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        select_list = self.parse_select_list()
        if select_list is None:
            return self.abandon(node)
        node.add_child(select_list)
        if not self.expect_keyword(node, "FROM", "Expected 'FROM' after select list"):
            return self.abandon(node)
        if not self.expect_identifier(node, "Expected table name"):
            return self.abandon(node)
        if self.check(TokenKind.KEYWORD, "WHERE"):
            where_node = self.parse_where_clause()
            if where_node is None:
                return self.abandon(node)
            node.add_child(where_node)
        if self.check(TokenKind.KEYWORD, "ORDER"):
            order_node = self.parse_order_clause()
            if order_node is None:
                return self.abandon(node)
            node.add_child(order_node)
        if not self.expect_delimiter(node, ";", "Expected ';' at end of query"):
            return self.abandon(node)
        return node

    def parse_select_list(self):
        node = self.create_node(NodeKind.SELECT_LIST)
        star = self.match(TokenKind.OPERATOR, "*")
        if star is not None:
            node.add_child(self.leaf(NodeKind.OPERATOR, star))
            return node
        while True:
            if not self.expect_identifier(node, "Expected column name"):
                return None
            comma = self.match(TokenKind.DELIMITER, ",")
            if comma is None:
                break
            node.add_child(self.leaf(NodeKind.DELIMITER, comma))
        return node

    def parse_order_clause(self):
        node = self.create_node(NodeKind.ORDER_CLAUSE)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        if not self.expect_keyword(node, "BY", "Expected 'BY' after 'ORDER'"):
            return None
        if not self.expect_identifier(node, "Expected column name in ORDER BY"):
            return None
        direction = self.match(TokenKind.KEYWORD, "ASC") or self.match(TokenKind.KEYWORD, "DESC")
        if direction is not None:
            node.add_child(self.leaf(NodeKind.KEYWORD, direction))
        return node

    def parse_insert_stmt(self):
        node = self.create_node(NodeKind.INSERT_STATEMENT)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        if not self.expect_keyword(node, "INTO", "Expected 'INTO' after 'INSERT'"):
            return self.abandon(node)
        if not self.expect_identifier(node, "Expected table name"):
            return self.abandon(node)
        if not self.expect_keyword(node, "VALUES", "Expected 'VALUES' keyword"):
            return self.abandon(node)
        if not self.expect_delimiter(node, "(", "Expected '(' before values"):
            return self.abandon(node)
        values = self.parse_value_list()
        if values is None:
            return self.abandon(node)
        node.add_child(values)
        if not self.expect_delimiter(node, ")", "Expected ')' after values"):
            return self.abandon(node)
        if not self.expect_delimiter(node, ";", "Expected ';' at end of statement"):
            return self.abandon(node)
        return node

    def parse_value_list(self):
        node = self.create_node(NodeKind.VALUE_LIST)
        while True:
            value = self.parse_term()
            if value is None:
                return None
            node.add_child(value)
            comma = self.match(TokenKind.DELIMITER, ",")
            if comma is None:
                break
            node.add_child(self.leaf(NodeKind.DELIMITER, comma))
        return node

    def parse_update_stmt(self):
        node = self.create_node(NodeKind.UPDATE_STATEMENT)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        if not self.expect_identifier(node, "Expected table name"):
            return self.abandon(node)
        if not self.expect_keyword(node, "SET", "Expected 'SET' keyword"):
            return self.abandon(node)
        assignments = self.parse_assignment_list()
        if assignments is None:
            return self.abandon(node)
        node.add_child(assignments)
        if self.check(TokenKind.KEYWORD, "WHERE"):
            where_node = self.parse_where_clause()
            if where_node is None:
                return self.abandon(node)
            node.add_child(where_node)
        if not self.expect_delimiter(node, ";", "Expected ';' at end of statement"):
            return self.abandon(node)
        return node

    def parse_assignment_list(self):
        node = self.create_node(NodeKind.ASSIGNMENT_LIST)
        while True:
            assign = self.create_node(NodeKind.ASSIGNMENT)
            if not self.expect_identifier(assign, "Expected column name"):
                return None
            op = self.match(TokenKind.OPERATOR, "=")
            if op is None:
                self.error("Expected '=' in assignment")
                return None
            assign.add_child(self.leaf(NodeKind.OPERATOR, op))
            value = self.parse_term()
            if value is None:
                return None
            assign.add_child(value)
            node.add_child(assign)
            comma = self.match(TokenKind.DELIMITER, ",")
            if comma is None:
                break
            node.add_child(self.leaf(NodeKind.DELIMITER, comma))
        return node

    def parse_delete_stmt(self):
        node = self.create_node(NodeKind.DELETE_STATEMENT)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        if not self.expect_keyword(node, "FROM", "Expected 'FROM' after 'DELETE'"):
            return self.abandon(node)
        if not self.expect_identifier(node, "Expected table name"):
            return self.abandon(node)
        if self.check(TokenKind.KEYWORD, "WHERE"):
            where_node = self.parse_where_clause()
            if where_node is None:
                return self.abandon(node)
            node.add_child(where_node)
        if not self.expect_delimiter(node, ";", "Expected ';' at end of statement"):
            return self.abandon(node)
        return node

    def parse_where_clause(self):
        node = self.create_node(NodeKind.WHERE_CLAUSE)
        node.add_child(self.leaf(NodeKind.KEYWORD, self.advance()))
        cond_node = self.parse_condition()
        if cond_node is None:
            return None
        node.add_child(cond_node)
        return node

    # Conditions, lowest to highest binding: OR, AND, NOT, relational, term

    def binary(self, left, op, right):
        node = ParseTreeNode(NodeKind.CONDITION, op.lexeme.upper(), op.line, op.column)
        node.add_child(left)
        node.add_child(self.leaf(NodeKind.OPERATOR, op))
        node.add_child(right)
        return node

    def parse_condition(self):
        left = self.parse_and_condition()
        if left is None:
            return None
        while self.check(TokenKind.KEYWORD, "OR"):
            op = self.advance()
            right = self.parse_and_condition()
            if right is None:
                return None
            left = self.binary(left, op, right)
        return left

    def parse_and_condition(self):
        left = self.parse_not_condition()
        if left is None:
            return None
        while self.check(TokenKind.KEYWORD, "AND"):
            op = self.advance()
            right = self.parse_not_condition()
            if right is None:
                return None
            left = self.binary(left, op, right)
        return left

    def parse_not_condition(self):
        op = self.match(TokenKind.KEYWORD, "NOT")
        if op is None:
            return self.parse_relational()
        operand = self.nested(self.parse_not_condition)
        if operand is None:
            return None
        node = ParseTreeNode(NodeKind.CONDITION, "NOT", op.line, op.column)
        node.add_child(self.leaf(NodeKind.OPERATOR, op))
        node.add_child(operand)
        return node

    def parse_relational(self):
        left = self.parse_term()
        if left is None:
            return None
        op = self.peek()
        is_relational = (
            (op.kind == TokenKind.OPERATOR and op.lexeme in RELATIONAL_OPERATORS)
            or (op.kind == TokenKind.KEYWORD and op.lexeme.upper() == "LIKE")
        )
        if not is_relational:
            return left
        self.advance()
        right = self.parse_term()
        if right is None:
            return None
        return self.binary(left, op, right)

    def parse_term(self):
        token = self.peek()
        if token.kind == TokenKind.IDENTIFIER:
            return self.leaf(NodeKind.IDENTIFIER, self.advance())
        if token.kind == TokenKind.NUMBER:
            return self.leaf(NodeKind.NUMBER, self.advance())
        if token.kind == TokenKind.STRING:
            return self.leaf(NodeKind.STRING, self.advance())
        if token.kind == TokenKind.KEYWORD:
            word = token.lexeme.upper()
            if word == "NULL":
                return self.leaf(NodeKind.KEYWORD, self.advance())
            if word in ("TRUE", "FALSE"):
                return self.leaf(NodeKind.BOOLEAN_LITERAL, self.advance())
        if token.kind == TokenKind.DELIMITER and token.lexeme == "(":
            self.advance()
            expr = self.nested(self.parse_condition)
            if expr is None:
                return None
            if self.match(TokenKind.DELIMITER, ")") is None:
                self.error("Expected ')' after expression")
                return None
            return expr
        self.error("Expected expression (identifier, value, or parenthesis)")
        return None


def parse(tokens, max_depth=DEFAULT_MAX_DEPTH):
    """Parse a token list. Returns (root node, syntax diagnostics)."""
    parser = Parser(tokens, max_depth)
    root = parser.parse_query()
    return root, parser.errors
