"""Interactive CLI that shows how statements are translated and configured."""

from __future__ import annotations

import time
from dataclasses import fields
from pathlib import Path
from typing import List, Optional, Tuple

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory

from ..cache import StatementCache
from ..config import Config, ConnectionConfig, load_config, parse_connection_url
from ..datatypes import (
    DEFAULT_TYPE_MAPPINGS,
    TypeMappings,
    create_default_converters,
    create_session_converters,
)
from ..errors import CqlBridgeError, InvalidConnectionUrlError
from ..processor import StatementProcessor
from ..statement import ParsedStatement
from ..utils.logging import setup_logging


class CqlBridgeRuntime:
    """Wraps the cache -> parse -> configure pipeline for one connection."""

    def __init__(self, connection: ConnectionConfig, type_mappings: Optional[TypeMappings] = None):
        self.connection = connection
        self.cache: StatementCache = StatementCache(connection.cql_cache_size)
        self.processor = StatementProcessor(self.cache)
        self.converters = create_default_converters()
        self.session_converters = create_session_converters(self.converters)
        if type_mappings is None:
            type_mappings = DEFAULT_TYPE_MAPPINGS
        self.type_mappings = type_mappings

    def translate(self, text: str) -> ParsedStatement:
        """Parse a statement through the shared cache."""
        return self.processor.parse(self.connection, text)

    def convert(self, cql_type: str, value: str) -> object:
        """Convert text into the Python type used for a native column type."""
        host_type = self.type_mappings.host_type_for(cql_type)
        return self.session_converters.convert(value, host_type)


class StatementPrinter:
    """Formats parsed statements for CLI display."""

    def __init__(self, emit):
        self.emit = emit

    def display(self, parsed: ParsedStatement, elapsed_ms: float) -> None:
        configuration = parsed.configuration
        self.emit(parsed.cql)
        self.emit(
            f"  type: {configuration.statement_type.value} "
            f"({configuration.category.value})"
        )
        self.emit(f"  consistency: {configuration.consistency_level.value}")
        if configuration.serial_consistency_level is not None:
            self.emit(f"  serial consistency: {configuration.serial_consistency_level.value}")
        if configuration.has_fetch_size:
            self.emit(f"  fetch size: {configuration.fetch_size}")
        self.emit(f"  read timeout: {configuration.read_timeout} ms")
        flags = self._enabled_flags(parsed)
        if flags:
            self.emit(f"  flags: {', '.join(flags)}")
        self.emit(f"translated in {elapsed_ms:.2f} ms")

    def _enabled_flags(self, parsed: ParsedStatement) -> List[str]:
        configuration = parsed.configuration
        flags = []
        for name in ("no_limit", "no_wait", "tracing", "replace_null_value"):
            if getattr(configuration, name):
                flags.append(name)
        return flags


class ConfigPrinter:
    """Prints connection settings and type mappings."""

    def __init__(self, emit):
        self.emit = emit

    def display_connection(self, connection: ConnectionConfig) -> None:
        self.emit(connection.connection_url)
        for field in fields(connection):
            if field.name == "password":
                continue
            value = getattr(connection, field.name)
            if hasattr(value, "value"):
                value = value.value
            self.emit(f"  {field.name}: {value}")

    def display_types(self, type_mappings: TypeMappings) -> None:
        for name in type_mappings.type_names():
            mapping = type_mappings.mapping_for(name)
            self.emit(
                f"  {name}: {mapping.sql_type.name} -> {mapping.host_type.__name__} "
                f"(precision {mapping.precision}, scale {mapping.scale})"
            )


class CqlBridgeRepl:
    """Interactive loop with full terminal support."""

    def __init__(
        self,
        runtime: CqlBridgeRuntime,
        printer: StatementPrinter,
        config_printer: ConfigPrinter,
    ):
        self.runtime = runtime
        self.printer = printer
        self.config_printer = config_printer
        self.session = self._create_session()

    def _create_session(self) -> PromptSession:
        """Create prompt session backed by persistent history."""
        history_file = self._history_path()
        history = FileHistory(str(history_file))
        auto_suggest = AutoSuggestFromHistory()
        session = PromptSession(history=history, auto_suggest=auto_suggest)
        return session

    def _history_path(self) -> Path:
        """Return history file path, creating the file when necessary."""
        history_path = Path(".cqlb_history")
        if not history_path.exists():
            history_path.touch()
        return history_path

    def run(self) -> None:
        buffer: List[str] = []
        while True:
            line, should_continue = self._read_line(buffer)
            if not should_continue:
                break
            if line is None:
                continue
            if not buffer and is_exit_command(line):
                break
            if not buffer and is_shortcut_command(line):
                self._execute_shortcut(line)
                continue
            buffer.append(line)
            if is_complete_statement(line):
                statement = "\n".join(buffer)
                buffer.clear()
                self._translate(statement)

    def _read_line(self, buffer: List[str]) -> Tuple[Optional[str], bool]:
        prompt = self._get_prompt(buffer)
        try:
            line = self.session.prompt(prompt)
            return line, True
        except EOFError:
            click.echo("")
            return None, False
        except KeyboardInterrupt:
            click.echo("")
            buffer.clear()
            return None, True

    def _get_prompt(self, buffer: List[str]) -> str:
        if buffer:
            return "...> "
        return "cqlb> "

    def _execute_shortcut(self, line: str) -> None:
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        if command == ".config":
            self.config_printer.display_connection(self.runtime.connection)
        elif command == ".types":
            self.config_printer.display_types(self.runtime.type_mappings)
        elif command == ".convert":
            self._convert(argument)
        else:
            click.echo(f"Unknown shortcut: {line.strip()}")
            click.echo("Available shortcuts: .config, .types, .convert <type> <value>")

    def _convert(self, argument: str) -> None:
        cql_type, _, value = argument.strip().partition(" ")
        if not cql_type or not value:
            click.echo("usage: .convert <type> <value>")
            return
        try:
            converted = self.runtime.convert(cql_type, value.strip())
        except CqlBridgeError as exc:
            click.echo(f"error: {exc}")
            return
        click.echo(f"{converted!r} ({type(converted).__name__})")

    def _translate(self, statement: str) -> None:
        clean = clean_statement(statement)
        if not clean:
            return
        try:
            start = time.time()
            parsed = self.runtime.translate(clean)
            elapsed = (time.time() - start) * 1000
            self.printer.display(parsed, elapsed)
        except CqlBridgeError as exc:
            click.echo(f"error: {exc}")


def is_exit_command(line: str) -> bool:
    trimmed = line.strip().lower()
    return trimmed in ("\\q", "quit", "exit")


def is_shortcut_command(line: str) -> bool:
    return line.strip().startswith(".")


def is_complete_statement(line: str) -> bool:
    return line.strip().endswith(";")


def clean_statement(statement: str) -> str:
    """Drop the terminating semicolon."""
    clean = statement.strip()
    if clean.endswith(";"):
        clean = clean[:-1].rstrip()
    return clean


def prepare_runtime(config_path: Optional[str], url: Optional[str]) -> Tuple[CqlBridgeRuntime, Config]:
    """Build the runtime from a YAML file, a connection URL or defaults.

    Settings carried by the URL override those read from the file.
    """
    if config_path:
        config = load_config(config_path)
    else:
        config = Config()
    if url:
        driver = config.driver.with_settings(parse_connection_url(url))
        config = Config(driver=driver, logger=config.logger)
    return CqlBridgeRuntime(config.driver), config


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file.",
)
@click.option(
    "-u",
    "--url",
    help="Connection URL, e.g. jdbc:c*:datastax://localhost:9042/system?fetchSize=500",
)
def cli(config_path: Optional[str], url: Optional[str]) -> None:
    """Entry point for the cqlb CLI."""
    try:
        runtime, config = prepare_runtime(config_path, url)
    except InvalidConnectionUrlError as exc:
        raise click.BadParameter(str(exc), param_hint="--url") from exc
    setup_logging(config.logger.level, config.logger.structured, config.logger.log_file)
    printer = StatementPrinter(click.echo)
    config_printer = ConfigPrinter(click.echo)
    click.echo(f"Connection: {runtime.connection.connection_url}")
    click.echo("Type statements terminated by ';'. Use \\q to exit.")
    click.echo("Use .config, .types or .convert <type> <value>.")
    repl = CqlBridgeRepl(runtime, printer, config_printer)
    repl.run()
