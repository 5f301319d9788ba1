# Text reports and Graphviz diagrams of the annotated parse tree

import logging

from graphviz import Digraph

from .parser import STATEMENT_KINDS, NodeKind

logger = logging.getLogger(__name__)

RULE = "=" * 80


def format_tokens(tokens):
    lines = [RULE, "TOKENS", RULE]
    lines.append(f"{'TYPE':<14} {'LEXEME':<30} {'LINE':<8} {'COLUMN':<8}")
    lines.append("-" * 80)
    for kind, lexeme, line, column in tokens:
        lines.append(f"{kind.value:<14} {lexeme:<30} {line:<8} {column:<8}")
    lines.append(RULE)
    return "\n".join(lines)


def format_diagnostics(title, diagnostics):
    if not diagnostics:
        return f"{title}: none"
    lines = [RULE, title.upper(), RULE]
    for i, diagnostic in enumerate(diagnostics, 1):
        lines.append(f"{i}. {diagnostic}")
    lines.append(RULE)
    return "\n".join(lines)


def node_label(node):
    label = node.kind.value
    if node.text:
        label += f": {node.text}"
    return label


def annotation_label(node):
    parts = []
    if node.data_type is not None:
        parts.append(f"Type: {node.data_type}")
    if node.symbol_ref is not None:
        parts.append(f"Ref: {node.symbol_ref}")
    return ", ".join(parts)


def format_tree(root):
    """Text rendering of the parse tree with its semantic annotations."""
    lines = []
    stack = [(root, 0, "")] if root is not None else []
    while stack:
        node, indent, prefix = stack.pop()
        info = prefix + node_label(node)
        annotations = annotation_label(node)
        if annotations:
            info += f"  [{annotations}]"
        lines.append("  " * indent + info)
        last = len(node.children) - 1
        for i in range(last, -1, -1):
            stack.append((node.children[i], indent + 1, "└─ " if i == last else "├─ "))
    return "\n".join(lines)


# fill, font, border
PALETTE = {
    "program": ("#263238", "#FFFFFF", "#37474F"),
    "statement": ("#BBDEFB", "#0D47A1", "#1565C0"),
    "keyword": ("#C8E6C9", "#1B5E20", "#2E7D32"),
    "table": ("#FFCDD2", "#B71C1C", "#C62828"),
    "column": ("#FFF9C4", "#F57F17", "#F9A825"),
    "type": ("#E1BEE7", "#4A148C", "#6A1B9A"),
    "literal": ("#C5E1A5", "#33691E", "#558B2F"),
    "condition": ("#FFE0B2", "#E65100", "#F57C00"),
    "error": ("#FF8A80", "#FFFFFF", "#D50000"),
    "default": ("#E3F2FD", "#1565C0", "#1976D2"),
}

LITERAL_KINDS = {NodeKind.NUMBER, NodeKind.STRING, NodeKind.BOOLEAN_LITERAL}


def node_style(node):
    if node.kind == NodeKind.PROGRAM:
        return PALETTE["program"]
    if node.kind in STATEMENT_KINDS:
        return PALETTE["statement"]
    if node.kind == NodeKind.ERROR:
        return PALETTE["error"]
    if node.kind == NodeKind.IDENTIFIER:
        return PALETTE["table"] if node.data_type == "TABLE" else PALETTE["column"]
    if node.kind == NodeKind.TYPE:
        return PALETTE["type"]
    if node.kind in LITERAL_KINDS:
        return PALETTE["literal"]
    if node.kind in (NodeKind.CONDITION, NodeKind.OPERATOR):
        return PALETTE["condition"]
    if node.kind == NodeKind.KEYWORD:
        return PALETTE["keyword"]
    return PALETTE["default"]


class TreeDiagram:
    """Builds a Graphviz digraph of an (annotated) parse tree."""

    def __init__(self, fmt="png"):
        self.fmt = fmt
        self.counter = 0
        self.graph = None

    def _count_nodes(self, root):
        return sum(1 for _ in root.walk())

    def build(self, root):
        total_nodes = self._count_nodes(root)
        nodesep = 0.5
        ranksep = 0.6
        if total_nodes > 20:
            nodesep = 0.7
            ranksep = 0.9
        if total_nodes > 50:
            nodesep = 1.0
            ranksep = 1.4

        self.graph = Digraph(format=self.fmt)
        self.graph.attr(rankdir='TB')
        self.graph.attr(nodesep=str(nodesep))
        self.graph.attr(ranksep=str(ranksep))
        self.graph.attr('node', shape='box', style='filled,rounded', fontname='Arial', fontsize='14')
        self.graph.attr('edge', color='#4A5568', penwidth='2', arrowsize='1.2')

        self.counter = 0
        self._add_nodes(root)
        return self.graph

    def _add_nodes(self, root):
        stack = [(root, None)]
        while stack:
            node, parent_id = stack.pop()
            node_id = f"node{self.counter}"
            self.counter += 1

            label = node_label(node)
            annotations = annotation_label(node)
            if annotations:
                label += f"\n[{annotations}]"

            fillcolor, fontcolor, border_color = node_style(node)
            self.graph.node(node_id, label, fillcolor=fillcolor, fontcolor=fontcolor,
                            color=border_color, penwidth='2')
            if parent_id:
                self.graph.edge(parent_id, node_id)
            stack.extend((child, node_id) for child in reversed(node.children))

    def render(self, root, filename="parse_tree"):
        """Write the diagram through the Graphviz binaries; returns the output path."""
        graph = self.build(root)
        output_path = graph.render(filename, cleanup=True)
        logger.info("parse tree diagram written to %s", output_path)
        return output_path
