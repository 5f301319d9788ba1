import argparse
import json
import logging
import sys

from graphviz import ExecutableNotFound

from .compiler import compile_source
from .config import Settings
from .render import TreeDiagram, format_diagnostics, format_tokens, format_tree

logger = logging.getLogger(__name__)

RULE_TITLE = "ANNOTATED PARSE TREE\n" + "=" * 80


def read_source(path):
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def print_report(result):
    print(format_tokens(result.tokens))
    print()
    print(format_diagnostics("Syntax errors", result.syntax_diagnostics))
    print()
    print(result.symbol_table.dump())
    print()
    print(format_diagnostics("Semantic errors", result.semantic_diagnostics))
    print()
    print(RULE_TITLE)
    print(format_tree(result.annotated_tree))
    if result.has_errors:
        print("\nAnalysis failed. Errors detected.")
    else:
        print("\nSemantic Analysis Successful. Query is valid.")


def build_arg_parser():
    parser = argparse.ArgumentParser(
        prog="sqlfront",
        description="Lex, parse and semantically check a SQL-like script",
    )
    parser.add_argument("path", help="input SQL file, or - for stdin")
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("--tree-image", metavar="FILE",
                        help="render the annotated parse tree with Graphviz to FILE")
    parser.add_argument("--log-level", help="logging level (default from SQLFRONT_LOG_LEVEL)")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    settings = Settings(log_level=args.log_level)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        source = read_source(args.path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 2

    result = compile_source(source, settings)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_report(result)

    if args.tree_image:
        try:
            TreeDiagram(settings.tree_format).render(result.annotated_tree, args.tree_image)
        except ExecutableNotFound:
            logger.error("Graphviz 'dot' executable not found; tree image not written")

    return 1 if result.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
