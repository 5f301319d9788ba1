"""
Full front end pipeline: text -> tokens -> parse tree -> annotated tree.

Every call builds its own lexer output, parser, analyzer and symbol table,
so concurrent calls never share state.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .config import Settings
from .diagnostics import Diagnostic
from .lexer import Token, tokenize_sql
from .parser import NodeKind, ParseTreeNode, Parser
from .semantic import SemanticAnalyzer
from .symbols import SymbolTable

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    tokens: List[Token]
    parse_tree: ParseTreeNode
    syntax_diagnostics: List[Diagnostic] = field(default_factory=list)
    symbol_table: SymbolTable = field(default_factory=SymbolTable)
    semantic_diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def annotated_tree(self):
        # The analyzer annotates the parse tree in place
        return self.parse_tree

    @property
    def has_semantic_errors(self):
        return bool(self.semantic_diagnostics)

    @property
    def has_errors(self):
        return bool(self.syntax_diagnostics or self.semantic_diagnostics)

    def to_dict(self):
        """JSON-ready view of the result for a hosting service."""
        tree = self.parse_tree.to_dict()
        return {
            "tokens": [
                {"type": t.kind.value, "lexeme": t.lexeme, "line": t.line, "column": t.column}
                for t in self.tokens
            ],
            "tree": tree,
            "syntaxErrors": [d.to_dict() for d in self.syntax_diagnostics],
            "symbolTable": self.symbol_table.to_dict(),
            "semanticErrors": [d.to_dict() for d in self.semantic_diagnostics],
            "annotatedTree": tree,
            "hasSemanticErrors": self.has_semantic_errors,
        }


def empty_result():
    tokens = tokenize_sql("")
    return CompileResult(tokens, ParseTreeNode(NodeKind.PROGRAM, "", 1, 1))


def compile_source(source_text, settings=None):
    """Run lexer, parser and semantic analyzer over source_text."""
    if source_text is None or not source_text.strip():
        logger.debug("nothing to compile")
        return empty_result()

    settings = settings or Settings()

    tokens = tokenize_sql(source_text)
    parser = Parser(tokens, max_depth=settings.max_condition_depth)
    tree = parser.parse_query()

    analyzer = SemanticAnalyzer()
    tree, symbol_table, semantic_errors = analyzer.analyze(tree)

    logger.info(
        "compiled %d tokens: %d syntax errors, %d semantic errors",
        len(tokens), len(parser.errors), len(semantic_errors),
    )
    return CompileResult(
        tokens=tokens,
        parse_tree=tree,
        syntax_diagnostics=parser.errors,
        symbol_table=symbol_table,
        semantic_diagnostics=semantic_errors,
    )
