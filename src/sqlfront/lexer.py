# Lexical Analyzer

import logging
from enum import Enum
from typing import NamedTuple

from .types import VALID_TYPES

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    STRING = "STRING"
    OPERATOR = "OPERATOR"
    DELIMITER = "DELIMITER"
    EOF = "EOF"
    ERROR = "ERROR"


class Token(NamedTuple):
    kind: TokenKind
    lexeme: str
    line: int
    column: int


KEYWORDS = {
    "SELECT", "FROM", "WHERE", "INSERT", "INTO", "VALUES",
    "UPDATE", "SET", "DELETE", "CREATE", "TABLE", "PRIMARY", "KEY",
    "AND", "OR", "NOT", "NULL", "TRUE", "FALSE",
    "ORDER", "BY", "ASC", "DESC", "LIKE",
} | set(VALID_TYPES)

STATEMENT_KEYWORDS = {"CREATE", "SELECT", "INSERT", "UPDATE", "DELETE"}

OPERATORS = {"=", "<>", "!=", "<=", ">=", "<", ">", "*"}
DELIMITERS = {"(", ")", ",", ";"}


def is_letter(ch):
    return ch.isalpha() or ch == "_"


def is_digit(ch):
    return "0" <= ch <= "9"


def is_whitespace(ch):
    return ch in " \t\r\n\f\v"


def describe_error(token):
    """Reason an ERROR token was produced, for diagnostics."""
    if token.lexeme.startswith("/*"):
        return "unclosed comment"
    if token.lexeme.startswith("'"):
        return "unclosed string"
    return f"invalid character '{token.lexeme}'"


def tokenize_sql(code):
    """Tokenize SQL code. The returned list always ends with an EOF token."""
    tokens = []
    i = 0
    line = 1
    column = 1
    length = len(code)

    while i < length:
        ch = code[i]

        if ch == '\n':
            line += 1
            column = 1
            i += 1
            continue

        if is_whitespace(ch):
            i += 1
            column += 1
            continue

        if code.startswith("--", i):
            while i < length and code[i] != '\n':
                i += 1
            continue

        if code.startswith("/*", i):
            end = code.find("*/", i + 2)
            if end == -1:
                tokens.append(Token(TokenKind.ERROR, "/*", line, column))
                break
            for c in code[i:end + 2]:
                if c == '\n':
                    line += 1
                    column = 1
                else:
                    column += 1
            i = end + 2
            continue

        if ch == "'":
            j = i + 1
            closed = False
            while j < length and code[j] != '\n':
                if code[j] == "'":
                    if code.startswith("''", j):
                        j += 2
                        continue
                    closed = True
                    j += 1
                    break
                j += 1
            kind = TokenKind.STRING if closed else TokenKind.ERROR
            tokens.append(Token(kind, code[i:j], line, column))
            column += j - i
            i = j
            continue

        if is_letter(ch):
            start = i
            while i < length and (is_letter(code[i]) or is_digit(code[i])):
                i += 1
            word = code[start:i]
            kind = TokenKind.KEYWORD if word.upper() in KEYWORDS else TokenKind.IDENTIFIER
            tokens.append(Token(kind, word, line, column))
            column += i - start
            continue

        if is_digit(ch):
            start = i
            has_dot = False
            while i < length and (is_digit(code[i]) or (code[i] == '.' and not has_dot)):
                if code[i] == '.':
                    has_dot = True
                i += 1
            tokens.append(Token(TokenKind.NUMBER, code[start:i], line, column))
            column += i - start
            continue

        two_char = code[i:i + 2]
        if two_char in OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, two_char, line, column))
            i += 2
            column += 2
            continue
        if ch in OPERATORS:
            tokens.append(Token(TokenKind.OPERATOR, ch, line, column))
            i += 1
            column += 1
            continue

        if ch in DELIMITERS:
            tokens.append(Token(TokenKind.DELIMITER, ch, line, column))
            i += 1
            column += 1
            continue

        tokens.append(Token(TokenKind.ERROR, ch, line, column))
        i += 1
        column += 1

    if tokens:
        last = tokens[-1]
        tokens.append(Token(TokenKind.EOF, "", last.line, last.column))
    else:
        tokens.append(Token(TokenKind.EOF, "", 1, 1))

    logger.debug("tokenized %d characters into %d tokens", length, len(tokens))
    return tokens
