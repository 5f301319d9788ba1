from dataclasses import dataclass


@dataclass(frozen=True)
class Diagnostic:
    """One syntax or semantic problem, positioned at the token that caused it."""

    line: int
    column: int
    message: str

    def to_dict(self):
        return {"line": self.line, "column": self.column, "message": self.message}

    def __str__(self):
        return f"[Line {self.line}, Col {self.column}] {self.message}"
