"""Tests for the cqlb CLI helpers."""

import datetime
import tempfile
from pathlib import Path

from click.testing import CliRunner

from cql_bridge.cli.cqlb import (
    ConfigPrinter,
    CqlBridgeRuntime,
    StatementPrinter,
    clean_statement,
    cli,
    is_complete_statement,
    is_exit_command,
    is_shortcut_command,
    prepare_runtime,
)
from cql_bridge.config import ConnectionConfig
from cql_bridge.datatypes import DEFAULT_TYPE_MAPPINGS
from cql_bridge.enums import ConsistencyLevel, StatementType


def test_runtime_translates_select():
    """CqlBridgeRuntime should translate and cache a basic query."""
    runtime = CqlBridgeRuntime(ConnectionConfig(row_limit=50))

    parsed = runtime.translate("select t.a from t")

    assert parsed.cql == "SELECT a FROM t LIMIT 50"
    assert parsed.statement_type == StatementType.SELECT
    assert runtime.translate("select t.a from t") is parsed
    assert len(runtime.cache) == 1


def test_runtime_cache_size_from_connection():
    """The cache is sized by the connection setting."""
    runtime = CqlBridgeRuntime(ConnectionConfig(cql_cache_size=3))

    assert runtime.cache.capacity == 3


def test_runtime_converts_by_native_type():
    """Values are converted to the host type of the native column type."""
    runtime = CqlBridgeRuntime(ConnectionConfig())

    assert runtime.convert("int", "12") == 12
    assert runtime.convert("date", "2024-02-29") == datetime.date(2024, 2, 29)
    assert runtime.convert("list<text>", "a,b") == ["a", "b"]
    assert runtime.converters.sealed is True
    assert runtime.session_converters.parent is runtime.converters


def test_statement_printer_output():
    """StatementPrinter shows the text and the resolved settings."""
    runtime = CqlBridgeRuntime(ConnectionConfig())
    parsed = runtime.translate("-- set fetch_size=5; tracing=true\nselect * from t")
    lines = []

    StatementPrinter(lines.append).display(parsed, 1.5)

    assert lines[0] == "SELECT * FROM t LIMIT 10000"
    assert "  type: SELECT (DML)" in lines
    assert "  consistency: LOCAL_ONE" in lines
    assert "  fetch size: 5" in lines
    assert "  flags: tracing" in lines
    assert lines[-1] == "translated in 1.50 ms"


def test_config_printer_hides_password():
    """The connection listing never prints the password."""
    lines = []

    ConfigPrinter(lines.append).display_connection(ConnectionConfig(password="hunter2"))

    assert lines[0] == "jdbc:c*:datastax://localhost/system?user=cassandra"
    assert "  read_consistency_level: LOCAL_ONE" in lines
    assert not any("hunter2" in line for line in lines)


def test_config_printer_types():
    """Every type mapping is listed."""
    lines = []

    ConfigPrinter(lines.append).display_types(DEFAULT_TYPE_MAPPINGS)

    assert len(lines) == len(DEFAULT_TYPE_MAPPINGS)
    assert "  bigint: BIGINT -> int (precision 19, scale 0)" in lines


def test_line_helpers():
    """REPL line classification helpers."""
    assert is_exit_command(" \\q ")
    assert is_exit_command("EXIT")
    assert not is_exit_command("select 1;")
    assert is_shortcut_command(".config")
    assert is_complete_statement("select 1 ;  ")
    assert not is_complete_statement("select 1")
    assert clean_statement(" select 1 ; ") == "select 1"


def test_prepare_runtime_url_overrides_file():
    """URL settings are applied over the YAML file."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write("driver:\n  keyspace: sales\n  row_limit: 5\n")
        config_path = f.name

    try:
        runtime, config = prepare_runtime(
            config_path, "jdbc:c*:datastax://db1/other?readConsistencyLevel=ALL"
        )
    finally:
        Path(config_path).unlink()

    assert runtime.connection.keyspace == "other"
    assert runtime.connection.hosts == "db1"
    assert runtime.connection.row_limit == 5
    assert runtime.connection.read_consistency_level == ConsistencyLevel.ALL
    assert config.driver is runtime.connection


def test_prepare_runtime_defaults():
    """Without options the default connection is used."""
    runtime, config = prepare_runtime(None, None)

    assert runtime.connection == ConnectionConfig()
    assert config.logger.level == "INFO"


def test_cli_rejects_bad_url():
    """An invalid URL is reported as a usage error."""
    result = CliRunner().invoke(cli, ["--url", "mysql://localhost"])

    assert result.exit_code == 2
    assert "--url" in result.output
