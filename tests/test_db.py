"""Development schema upgrades for databases created before newer columns existed."""

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from storefront_lab.db import ensure_schema

OLD_STUDENTS = (
    "CREATE TABLE students (id INTEGER PRIMARY KEY, student_id VARCHAR(128) NOT NULL UNIQUE, "
    "name VARCHAR(256), created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL)"
)
OLD_SUBMISSIONS = (
    "CREATE TABLE submissions (id INTEGER PRIMARY KEY, student_id VARCHAR(128) NOT NULL, "
    "design_choices TEXT NOT NULL, conversion_rate FLOAT NOT NULL, bounce_rate FLOAT NOT NULL, "
    "click_through_rate FLOAT NOT NULL, avg_time_on_page FLOAT NOT NULL, "
    "cart_abandonment_rate FLOAT NOT NULL, ai_report TEXT, created_at DATETIME NOT NULL)"
)


@pytest.fixture
def old_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    with engine.begin() as conn:
        conn.exec_driver_sql(OLD_STUDENTS)
        conn.exec_driver_sql(OLD_SUBMISSIONS)
        conn.exec_driver_sql(
            "INSERT INTO students (student_id, name, created_at, updated_at) "
            "VALUES ('student001', 'Alice Johnson', '2024-01-01 00:00:00', '2024-01-01 00:00:00')"
        )
    yield engine
    engine.dispose()


def _columns(engine, table):
    return {c["name"] for c in inspect(engine).get_columns(table)}


class TestEnsureSchema:
    def test_adds_missing_columns(self, old_engine):
        assert "draft_design_choices" not in _columns(old_engine, "students")
        assert "screenshot_path" not in _columns(old_engine, "submissions")
        ensure_schema(bind=old_engine)
        assert "draft_design_choices" in _columns(old_engine, "students")
        assert "screenshot_path" in _columns(old_engine, "submissions")

    def test_existing_rows_kept(self, old_engine):
        ensure_schema(bind=old_engine)
        with old_engine.connect() as conn:
            rows = conn.exec_driver_sql("SELECT student_id, draft_design_choices FROM students").all()
        assert [tuple(r) for r in rows] == [("student001", None)]

    def test_idempotent(self, old_engine):
        ensure_schema(bind=old_engine)
        ensure_schema(bind=old_engine)
        assert "screenshot_path" in _columns(old_engine, "submissions")

    def test_missing_tables_ignored(self):
        engine = create_engine("sqlite://", poolclass=StaticPool, future=True)
        ensure_schema(bind=engine)
        assert inspect(engine).get_table_names() == []
        engine.dispose()
