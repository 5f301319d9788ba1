# Symbol Table: the catalog of tables declared by CREATE TABLE

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Column:
    name: str
    data_type: str

    def __str__(self):
        return f"{self.name}: {self.data_type}"


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...]

    def get_column(self, column_name: str) -> Optional[Column]:
        wanted = column_name.lower()
        for column in self.columns:
            if column.name.lower() == wanted:
                return column
        return None

    def has_column(self, column_name: str) -> bool:
        return self.get_column(column_name) is not None

    def get_column_type(self, column_name: str) -> Optional[str]:
        column = self.get_column(column_name)
        return column.data_type if column else None

    def __str__(self):
        return f"{self.name} ({', '.join(str(c) for c in self.columns)})"


class SymbolTable:
    """
    Case-insensitive registry of tables and their columns.

    Tables are only ever added; iteration follows insertion order.
    """

    def __init__(self):
        self._tables: Dict[str, Table] = {}

    @staticmethod
    def _key(name: str) -> str:
        return name.lower()

    def add_table(self, name: str, columns) -> bool:
        """
        Register a table. Returns False, leaving the catalog unchanged, when a
        table with the same name (ignoring case) is already present.
        """
        if self.table_exists(name):
            return False
        columns = tuple(columns)
        seen = set()
        for column in columns:
            key = self._key(column.name)
            if key in seen:
                raise ValueError(f"Duplicate column '{column.name}' in table '{name}'")
            seen.add(key)
        self._tables[self._key(name)] = Table(name, columns)
        return True

    def table_exists(self, name: str) -> bool:
        return self._key(name) in self._tables

    def get_table(self, name: str) -> Optional[Table]:
        return self._tables.get(self._key(name))

    def column_exists(self, table_name: str, column_name: str) -> bool:
        table = self.get_table(table_name)
        return table is not None and table.has_column(column_name)

    def get_column_type(self, table_name: str, column_name: str) -> Optional[str]:
        table = self.get_table(table_name)
        return table.get_column_type(column_name) if table else None

    def all_tables(self) -> List[Table]:
        return list(self._tables.values())

    def to_dict(self):
        return [
            {
                "name": table.name,
                "columns": [{"name": c.name, "dataType": c.data_type} for c in table.columns],
            }
            for table in self._tables.values()
        ]

    def dump(self) -> str:
        """Format symbol table as a readable string."""
        if not self._tables:
            return "Symbol Table: (empty)\n"

        lines = ["=" * 60]
        lines.append("SYMBOL TABLE")
        lines.append("=" * 60)

        for table in self._tables.values():
            lines.append(f"\nTable: {table.name}")
            lines.append("-" * 40)
            lines.append(f"{'Column Name':<20} {'Data Type':<15}")
            lines.append("-" * 40)
            for column in table.columns:
                lines.append(f"{column.name:<20} {column.data_type:<15}")

        lines.append("=" * 60)
        return "\n".join(lines)

    def __contains__(self, name):
        return isinstance(name, str) and self.table_exists(name)

    def __iter__(self):
        return iter(self.all_tables())

    def __len__(self):
        return len(self._tables)

    def __str__(self):
        if not self._tables:
            return "Symbol Table: (empty)"
        return "Symbol Table:\n" + "\n".join(f"  - {t}" for t in self._tables.values())
