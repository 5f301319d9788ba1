from sqlfront.lexer import Token, TokenKind, tokenize_sql
from sqlfront.parser import NodeKind, Parser, parse


def parse_sql(code, **kwargs):
    return parse(tokenize_sql(code), **kwargs)


def kinds(node):
    return [child.kind for child in node.children]


def test_empty_input_gives_empty_program():
    root, errors = parse_sql("")
    assert root.kind == NodeKind.PROGRAM
    assert root.children == []
    assert errors == []


def test_create_table_tree_shape():
    root, errors = parse_sql("CREATE TABLE users (id INT PRIMARY KEY, name TEXT);")
    assert errors == []
    create = root.children[0]
    assert create.kind == NodeKind.CREATE_STATEMENT
    assert kinds(create) == [
        NodeKind.KEYWORD, NodeKind.KEYWORD, NodeKind.IDENTIFIER, NodeKind.DELIMITER,
        NodeKind.FIELD_LIST, NodeKind.DELIMITER, NodeKind.DELIMITER,
    ]
    fields = create.find(NodeKind.FIELD_LIST).find_all(NodeKind.FIELD_DEFINITION)
    assert [f.find(NodeKind.IDENTIFIER).text for f in fields] == ["id", "name"]
    assert [f.find(NodeKind.TYPE).text for f in fields] == ["INT", "TEXT"]
    assert [k.text for k in fields[0].find_all(NodeKind.KEYWORD)] == ["PRIMARY", "KEY"]


def test_unknown_type_name_is_left_for_the_analyzer():
    root, errors = parse_sql("CREATE TABLE t (a STRNG);")
    assert errors == []
    field = root.children[0].find(NodeKind.FIELD_LIST).children[0]
    assert field.find(NodeKind.TYPE).text == "STRNG"


def test_select_with_where_and_order_by():
    root, errors = parse_sql("SELECT id, name FROM users WHERE id = 1 ORDER BY name DESC;")
    assert errors == []
    select = root.children[0]
    assert select.kind == NodeKind.SELECT_STATEMENT
    select_list = select.find(NodeKind.SELECT_LIST)
    assert [c.text for c in select_list.find_all(NodeKind.IDENTIFIER)] == ["id", "name"]
    assert select.find(NodeKind.IDENTIFIER).text == "users"
    order = select.find(NodeKind.ORDER_CLAUSE)
    assert [c.text for c in order.children] == ["ORDER", "BY", "name", "DESC"]


def test_select_star():
    root, errors = parse_sql("SELECT * FROM t;")
    assert errors == []
    star = root.children[0].find(NodeKind.SELECT_LIST).children[0]
    assert (star.kind, star.text) == (NodeKind.OPERATOR, "*")


def test_insert_update_delete():
    root, errors = parse_sql(
        "INSERT INTO t VALUES (1, 2.5, 'x', NULL, TRUE);\n"
        "UPDATE t SET a = 1, b = 'y' WHERE c <> 3;\n"
        "DELETE FROM t WHERE a >= 1;\n"
    )
    assert errors == []
    assert kinds(root) == [
        NodeKind.INSERT_STATEMENT, NodeKind.UPDATE_STATEMENT, NodeKind.DELETE_STATEMENT,
    ]
    values = root.children[0].find(NodeKind.VALUE_LIST)
    assert [c.kind for c in values.children if c.kind != NodeKind.DELIMITER] == [
        NodeKind.NUMBER, NodeKind.NUMBER, NodeKind.STRING, NodeKind.KEYWORD,
        NodeKind.BOOLEAN_LITERAL,
    ]
    assignments = root.children[1].find(NodeKind.ASSIGNMENT_LIST).find_all(NodeKind.ASSIGNMENT)
    assert [a.children[0].text for a in assignments] == ["a", "b"]
    assert root.children[2].find(NodeKind.WHERE_CLAUSE) is not None


def test_and_binds_tighter_than_or():
    root, errors = parse_sql("SELECT * FROM t WHERE a = 1 OR b = 2 AND c = 3;")
    assert errors == []
    cond = root.children[0].find(NodeKind.WHERE_CLAUSE).children[1]
    assert (cond.kind, cond.text) == (NodeKind.CONDITION, "OR")
    left, op, right = cond.children
    assert left.text == "="
    assert op.kind == NodeKind.OPERATOR
    assert right.text == "AND"
    assert [c.text for c in right.children] == ["=", "AND", "="]


def test_not_and_parentheses():
    root, errors = parse_sql("SELECT * FROM t WHERE NOT (a = 1 OR b = 2) AND c LIKE 'x';")
    assert errors == []
    cond = root.children[0].find(NodeKind.WHERE_CLAUSE).children[1]
    assert cond.text == "AND"
    not_node, _, like = cond.children
    assert not_node.text == "NOT"
    assert [c.kind for c in not_node.children] == [NodeKind.OPERATOR, NodeKind.CONDITION]
    assert not_node.children[1].text == "OR"
    assert like.text == "LIKE"


def test_misspelled_keyword_reports_once_and_resynchronizes():
    root, errors = parse_sql("SELEC * FROM t;\nSELECT * FROM t;")
    assert len(errors) == 1
    assert (errors[0].line, errors[0].column) == (1, 1)
    assert "SELEC" in errors[0].message
    assert kinds(root) == [NodeKind.SELECT_STATEMENT]
    assert root.children[0].line == 2


def test_error_inside_statement_keeps_partial_node():
    root, errors = parse_sql("SELECT name FROM ;\nDELETE FROM t;")
    assert len(errors) == 1
    assert errors[0].message.startswith("Expected table name")
    select, delete = root.children
    assert select.children[-1].kind == NodeKind.ERROR
    assert select.children[-1].text == ";"
    assert delete.kind == NodeKind.DELETE_STATEMENT
    assert delete.children[-1].kind == NodeKind.DELIMITER


def test_missing_semicolon_does_not_swallow_next_statement():
    root, errors = parse_sql("CREATE TABLE t (a INT)\nSELECT * FROM t;")
    assert len(errors) == 1
    assert (errors[0].line, errors[0].column) == (2, 1)
    assert kinds(root) == [NodeKind.CREATE_STATEMENT, NodeKind.SELECT_STATEMENT]


def test_missing_semicolon_at_end_of_input():
    root, errors = parse_sql("SELECT * FROM t")
    assert len(errors) == 1
    assert "end of input" in errors[0].message
    assert root.children[0].children[-1].kind == NodeKind.ERROR


def test_errors_in_several_statements_are_all_reported():
    root, errors = parse_sql("SELECT FROM t;\nINSERT t VALUES (1);\nDELETE FROM t;")
    assert [e.line for e in errors] == [1, 2]
    assert len(root.children) == 3


def test_lexer_error_token_becomes_syntax_error():
    root, errors = parse_sql("SELECT @ FROM t;")
    assert len(errors) == 1
    assert "invalid character '@'" in errors[0].message
    assert (errors[0].line, errors[0].column) == (1, 8)


def test_missing_term_in_condition():
    root, errors = parse_sql("SELECT * FROM t WHERE a = ;")
    assert len(errors) == 1
    assert errors[0].message.startswith("Expected expression")


def test_duplicate_position_errors_collapse():
    token = Token(TokenKind.IDENTIFIER, "x", 3, 4)
    other = Token(TokenKind.IDENTIFIER, "y", 3, 9)
    parser = Parser([token, other])
    parser.error("first", token)
    parser.error("second", token)
    assert [e.message for e in parser.errors] == ["first, found 'x'"]
    parser.error("third", other)
    assert len(parser.errors) == 2


def test_dedup_only_looks_at_previous_error():
    a = Token(TokenKind.IDENTIFIER, "a", 1, 1)
    b = Token(TokenKind.IDENTIFIER, "b", 1, 3)
    parser = Parser([a, b])
    parser.error("one", a)
    parser.error("two", b)
    parser.error("three", a)
    assert len(parser.errors) == 3


def test_parser_adds_missing_eof():
    parser = Parser([Token(TokenKind.KEYWORD, "SELECT", 2, 5)])
    assert parser.tokens[-1] == Token(TokenKind.EOF, "", 2, 5)


def test_deep_nesting_is_reported_not_crashed():
    code = "SELECT * FROM t WHERE " + "(" * 30 + "a = 1" + ")" * 30 + ";\nDELETE FROM t;"
    root, errors = parse_sql(code, max_depth=10)
    assert len(errors) == 1
    assert errors[0].message.startswith("Condition nested too deeply")
    assert root.children[-1].kind == NodeKind.DELETE_STATEMENT


def test_default_depth_allows_reasonable_nesting():
    code = "SELECT * FROM t WHERE " + "(" * 50 + "a = 1" + ")" * 50 + ";"
    root, errors = parse_sql(code)
    assert errors == []


def test_nodes_carry_token_positions():
    root, errors = parse_sql("DELETE FROM t\nWHERE a = 1;")
    where = root.children[0].find(NodeKind.WHERE_CLAUSE)
    cond = where.children[1]
    assert (where.line, where.col) == (2, 1)
    assert (cond.line, cond.col) == (2, 9)
    assert (cond.children[2].line, cond.children[2].col) == (2, 11)


def test_walk_is_preorder():
    root, _ = parse_sql("DELETE FROM t;")
    assert [n.kind for n in root.walk()][:3] == [
        NodeKind.PROGRAM, NodeKind.DELETE_STATEMENT, NodeKind.KEYWORD,
    ]
