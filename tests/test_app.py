import json

from sqlfront.app import main


def write_sql(tmp_path, text):
    path = tmp_path / "input.sql"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_valid_script_exits_zero(tmp_path, capsys):
    path = write_sql(tmp_path, "CREATE TABLE t (a INT);\nSELECT a FROM t;\n")
    assert main([path]) == 0
    out = capsys.readouterr().out
    assert "SYMBOL TABLE" in out
    assert "ANNOTATED PARSE TREE" in out
    assert "Semantic Analysis Successful" in out


def test_errors_exit_one(tmp_path, capsys):
    path = write_sql(tmp_path, "SELECT * FROM ghost;\n")
    assert main([path]) == 1
    assert "Table 'ghost' does not exist" in capsys.readouterr().out


def test_json_output(tmp_path, capsys):
    path = write_sql(tmp_path, "CREATE TABLE t (a INT);\n")
    assert main([path, "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["symbolTable"][0]["name"] == "t"
    assert data["hasSemanticErrors"] is False


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.sql")]) == 2
    assert "Error reading file" in capsys.readouterr().err


def test_undecodable_file(tmp_path, capsys):
    path = tmp_path / "latin.sql"
    path.write_bytes(b"\xff\xfe SELECT")
    assert main([str(path)]) == 2
    assert "Error reading file" in capsys.readouterr().err
