# tests/test_sa/utils.py
from typing import List, Dict, Any, Optional
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session


class DBInspector:
    """Reads back what SQLite actually stored (namespaces are translated away)"""

    def __init__(self, session: Session):
        self.session = session
        self.engine = session.get_bind()
        self.inspector = inspect(self.engine)

    def get_table_info(self, table_name: str) -> Dict[str, Any]:
        """Get detailed information about a specific table"""
        return {
            'columns': self.inspector.get_columns(table_name),
            'primary_key': self.inspector.get_pk_constraint(table_name),
            'foreign_keys': self.inspector.get_foreign_keys(table_name),
            'indexes': self.inspector.get_indexes(table_name),
        }

    def get_all_tables(self) -> List[str]:
        return self.inspector.get_table_names()

    def count_rows(self, table_name: str) -> int:
        result = self.session.execute(text(f'SELECT COUNT(*) FROM "{table_name}"'))
        return result.scalar()

    def get_schema_sql(self, table_name: str) -> str:
        """Get CREATE TABLE SQL for a table"""
        result = self.session.execute(
            text("SELECT sql FROM sqlite_master WHERE type='table' AND name=:name"),
            {'name': table_name}
        )
        return result.scalar() or ''

    def foreign_key_actions(self, table_name: str) -> Dict[str, Optional[str]]:
        """Local column -> ON DELETE action as stored by the database"""
        actions = {}
        for fk in self.get_table_info(table_name)['foreign_keys']:
            ondelete = (fk.get('options') or {}).get('ondelete')
            for column in fk['constrained_columns']:
                actions[column] = ondelete.upper() if ondelete else None
        return actions

    def unique_indexes(self, table_name: str) -> Dict[str, List[str]]:
        return {
            idx['name']: idx['column_names']
            for idx in self.get_table_info(table_name)['indexes']
            if idx['unique']
        }

    def describe_table(self, table_name: str) -> str:
        """Get a human-readable description of a table"""
        info = self.get_table_info(table_name)

        description = [f"\nTable: {table_name}"]
        description.append("\nColumns:")
        for col in info['columns']:
            nullable = "NULL" if col['nullable'] else "NOT NULL"
            default = f"DEFAULT {col['default']}" if col['default'] is not None else ""
            description.append(f"  - {col['name']}: {col['type']} {nullable} {default}")

        if info['foreign_keys']:
            description.append("\nForeign Keys:")
            for fk in info['foreign_keys']:
                ondelete = (fk.get('options') or {}).get('ondelete', 'NO ACTION')
                description.append(
                    f"  - {', '.join(fk['constrained_columns'])} -> "
                    f"{fk['referred_table']}({', '.join(fk['referred_columns'])}) ON DELETE {ondelete}"
                )

        if info['indexes']:
            description.append("\nIndexes:")
            for idx in info['indexes']:
                unique = "UNIQUE " if idx['unique'] else ""
                description.append(
                    f"  - {unique}INDEX {idx['name']} ON ({', '.join(c for c in idx['column_names'] if c)})"
                )

        description.append(f"\nRow Count: {self.count_rows(table_name)}")
        return "\n".join(description)


def print_table_schema(session: Session, table_name: str):
    """Print detailed schema information for a table"""
    print(DBInspector(session).describe_table(table_name))


def compare_model_to_db(session: Session, model_class) -> List[str]:
    """Compare a model's columns with the stored table"""
    differences = []
    inspector = DBInspector(session)
    table_name = model_class.__table__.name
    model_columns = set(model_class.__table__.columns.keys())
    db_columns = {c['name'] for c in inspector.get_table_info(table_name)['columns']}

    for col_name in sorted(model_columns - db_columns):
        differences.append(f"Column '{col_name}' exists in model but not in database")
    for col_name in sorted(db_columns - model_columns):
        differences.append(f"Column '{col_name}' exists in database but not in model")
    return differences
