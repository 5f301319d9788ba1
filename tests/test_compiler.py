import json

import pytest

from sqlfront import Settings, compile_source
from sqlfront.lexer import TokenKind
from sqlfront.parser import NodeKind

from conftest import messages


@pytest.mark.parametrize("source", [None, "", "   \n\t"])
def test_nothing_to_compile(source):
    result = compile_source(source)
    assert [t.kind for t in result.tokens] == [TokenKind.EOF]
    assert result.parse_tree.kind == NodeKind.PROGRAM
    assert result.parse_tree.children == []
    assert result.syntax_diagnostics == []
    assert result.semantic_diagnostics == []
    assert len(result.symbol_table) == 0
    assert not result.has_semantic_errors


def test_end_to_end_valid_script():
    result = compile_source(
        "CREATE TABLE users (id INT, name TEXT); SELECT name FROM users WHERE id = 1;"
    )
    assert result.syntax_diagnostics == []
    assert result.semantic_diagnostics == []
    assert not result.has_errors
    assert result.annotated_tree is result.parse_tree
    select = result.annotated_tree.children[1]
    cond = select.find(NodeKind.WHERE_CLAUSE).children[1]
    assert cond.data_type == "BOOLEAN"
    assert cond.children[0].symbol_ref == "users.id"


def test_unknown_table_end_to_end():
    result = compile_source("SELECT * FROM ghost;")
    assert result.syntax_diagnostics == []
    assert messages(result.semantic_diagnostics) == ["Table 'ghost' does not exist"]
    assert result.has_semantic_errors


def test_unquoted_string_end_to_end():
    result = compile_source(
        "CREATE TABLE users (id INT, name TEXT);\nINSERT INTO users VALUES (1, bob);"
    )
    assert len(result.semantic_diagnostics) == 1
    assert "single quotes" in result.semantic_diagnostics[0].message
    assert "Type mismatch" not in result.semantic_diagnostics[0].message


def test_channels_stay_separate():
    result = compile_source("SELEC * FROM t;\nSELECT * FROM t;")
    assert len(result.syntax_diagnostics) == 1
    assert messages(result.semantic_diagnostics) == ["Table 't' does not exist"]


def test_settings_control_nesting_limit():
    source = "SELECT * FROM t WHERE " + "(" * 8 + "a = 1" + ")" * 8 + ";"
    assert compile_source(source, Settings(max_condition_depth=20)).syntax_diagnostics == []
    limited = compile_source(source, Settings(max_condition_depth=4))
    assert messages(limited.syntax_diagnostics)[0].startswith("Condition nested too deeply")


def test_to_dict_is_json_ready():
    result = compile_source(
        "CREATE TABLE users (id INT, name TEXT);\nSELECT nope FROM users"
    )
    data = json.loads(json.dumps(result.to_dict()))
    assert data["tokens"][0] == {"type": "KEYWORD", "lexeme": "CREATE", "line": 1, "column": 1}
    assert data["tokens"][-1]["type"] == "EOF"
    assert data["symbolTable"] == [{
        "name": "users",
        "columns": [
            {"name": "id", "dataType": "INT"},
            {"name": "name", "dataType": "TEXT"},
        ],
    }]
    assert len(data["syntaxErrors"]) == 1
    assert data["semanticErrors"] == [
        {"line": 2, "column": 8, "message": "Column 'nope' does not exist in table 'users'"}
    ]
    assert data["hasSemanticErrors"] is True
    assert data["tree"]["kind"] == "Program"
    assert data["annotatedTree"] == data["tree"]
    create = data["tree"]["children"][0]
    assert create["kind"] == "CreateStatement"
    table_name = create["children"][2]
    assert (table_name["dataType"], table_name["symbolRef"]) == ("TABLE", "users")


def test_each_call_builds_its_own_catalog():
    first = compile_source("CREATE TABLE t (a INT);")
    second = compile_source("SELECT * FROM t;")
    assert first.symbol_table is not second.symbol_table
    assert messages(second.semantic_diagnostics) == ["Table 't' does not exist"]


def test_long_or_chain():
    terms = " OR ".join(f"id = {i}" for i in range(1000))
    result = compile_source(f"CREATE TABLE t (id INT);\nSELECT * FROM t WHERE {terms};")
    assert result.syntax_diagnostics == []
    assert result.semantic_diagnostics == []
    data = result.to_dict()
    node = data["tree"]["children"][1]["children"][4]["children"][1]
    depth = 0
    while node["kind"] == "Condition" and node["lexeme"] == "OR":
        assert node["dataType"] == "BOOLEAN"
        node = node["children"][0]
        depth += 1
    assert depth == 999
    assert node["children"][0]["symbolRef"] == "t.id"


def test_long_chain_type_errors_in_source_order():
    terms = " AND ".join(f"id = '{i}'" for i in range(600))
    result = compile_source(f"CREATE TABLE t (id INT);\nSELECT * FROM t WHERE {terms};")
    assert len(result.semantic_diagnostics) == 600
    columns = [d.column for d in result.semantic_diagnostics]
    assert columns == sorted(columns)
