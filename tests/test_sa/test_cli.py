# tests/test_sa/test_cli.py
import pytest
from click.testing import CliRunner
import cli as cli_package
from cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


def test_ddl_postgres(runner):
    result = runner.invoke(cli, ["db", "ddl"])
    assert result.exit_code == 0, result.output
    assert 'CREATE SCHEMA IF NOT EXISTS "server";' in result.output
    assert "CREATE TABLE server.borrow_request" in result.output


def test_ddl_sqlite_namespace_filter(runner):
    result = runner.invoke(cli, ["db", "ddl", "--dialect", "sqlite", "--schema", "server"])
    assert result.exit_code == 0, result.output
    assert "CREATE TABLE library_books" in result.output
    assert "server." not in result.output


def test_package_exposes_group():
    assert cli_package.cli is cli


def test_ddl_unknown_dialect(runner):
    result = runner.invoke(cli, ["db", "ddl", "--dialect", "oracle"])
    assert result.exit_code != 0


def test_init_then_check(runner, db_url):
    result = runner.invoke(cli, ["db", "init", "--database-url", db_url])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["db", "check", "--database-url", db_url])
    assert result.exit_code == 0, result.output
    assert "Database matches the models" in result.output


def test_init_reports_database_errors(runner, tmp_path):
    """An unreachable database gives a short error, not a traceback"""
    url = f"sqlite:///{tmp_path / 'missing' / 'cli.db'}"
    result = runner.invoke(cli, ["db", "init", "--database-url", url])
    assert result.exit_code == 1
    assert "Error initialising database" in result.output
    assert isinstance(result.exception, SystemExit)


def test_check_reports_missing_tables(runner, db_url):
    result = runner.invoke(cli, ["db", "check", "--database-url", db_url])
    assert result.exit_code == 1
    assert "declared but missing" in result.output


def test_migrate_and_current(runner, db_url):
    result = runner.invoke(cli, ["db", "current", "--database-url", db_url])
    assert "No revision applied" in result.output

    result = runner.invoke(cli, ["db", "migrate", "--database-url", db_url])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["db", "current", "--database-url", db_url])
    assert result.output.strip() == "0001"

    result = runner.invoke(cli, ["db", "downgrade", "base", "--database-url", db_url])
    assert result.exit_code == 0, result.output


def test_migrate_unknown_revision(runner, db_url):
    result = runner.invoke(cli, ["db", "migrate", "nope", "--database-url", db_url])
    assert result.exit_code == 1


def test_drop_needs_confirmation(runner, db_url):
    runner.invoke(cli, ["db", "init", "--database-url", db_url])
    result = runner.invoke(cli, ["db", "drop", "--database-url", db_url], input="n\n")
    assert result.exit_code != 0

    result = runner.invoke(cli, ["db", "drop", "--yes", "--database-url", db_url])
    assert result.exit_code == 0, result.output


def test_seed_list(runner):
    result = runner.invoke(cli, ["seed", "list"])
    assert result.exit_code == 0
    assert result.output.splitlines()[1] == "bookshelf.seeds.seed_00_basic"


def test_seed_run(runner, db_url):
    runner.invoke(cli, ["db", "init", "--database-url", db_url])
    result = runner.invoke(cli, ["--log-level", "WARNING", "seed", "run", "--database-url", db_url])
    assert result.exit_code == 0, result.output
    assert "bookshelf.seeds.seed_02_library_system: ok" in result.output
