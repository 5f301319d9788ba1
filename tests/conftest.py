import pytest

from sqlfront import compile_source

USERS_SCHEMA = "CREATE TABLE users (id INT, name TEXT, score FLOAT);\n"


@pytest.fixture
def compile_with_users():
    """Compile source with a users(id INT, name TEXT, score FLOAT) table declared first."""
    def _compile(source):
        return compile_source(USERS_SCHEMA + source)
    return _compile


def messages(diagnostics):
    return [d.message for d in diagnostics]
