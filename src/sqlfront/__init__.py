"""
sqlfront: lexer, parser and semantic analyzer for a small SQL-like language.

    >>> from sqlfront import compile_source
    >>> result = compile_source("CREATE TABLE t (id INT); SELECT id FROM t;")
    >>> result.has_errors
    False
"""

from .compiler import CompileResult, compile_source
from .config import Settings
from .diagnostics import Diagnostic
from .lexer import Token, TokenKind, tokenize_sql
from .parser import NodeKind, ParseTreeNode, Parser, parse
from .semantic import SemanticAnalyzer, analyze
from .symbols import Column, SymbolTable, Table
from .types import compatible

__version__ = "0.4.0"

__all__ = [
    "Column",
    "CompileResult",
    "Diagnostic",
    "NodeKind",
    "ParseTreeNode",
    "Parser",
    "SemanticAnalyzer",
    "Settings",
    "SymbolTable",
    "Table",
    "Token",
    "TokenKind",
    "analyze",
    "compatible",
    "compile_source",
    "parse",
    "tokenize_sql",
]
