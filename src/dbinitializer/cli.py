import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_DOWNLOAD_TIMEOUT, DEFAULT_ENCODING, DEFAULT_SEPARATOR
from .core import DatabaseInitializer
from .errors import InitializerError
from .models import InitializationSettings
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.connections import PsqlConnection, SqliteConnection
from .services.content_access import ContentAccessService
from .services.location_resolver import LocationResolver
from .services.report import ReportService

console = Console()


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None and cli_value != ():
        return cli_value
    if key in config:
        return config[key]
    return default


def _print_failures(result):
    table = Table(title="Failed statements")
    table.add_column("Script")
    table.add_column("#", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Statement")
    table.add_column("Error", style="red")
    for outcome in result.failures:
        statement = outcome.statement
        table.add_row(
            statement.source_name,
            str(statement.index),
            str(statement.line),
            statement.excerpt,
            outcome.error,
        )
    console.print(table)


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--schema",
    "ddl_locations",
    multiple=True,
    help="DDL script location (repeatable). Prefix with 'optional:' to allow it to be missing.",
)
@click.option(
    "--data",
    "dml_locations",
    multiple=True,
    help="DML script location (repeatable). Applied after all schema scripts.",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    default=None,
    help="Keep applying statements after a statement fails.",
)
@click.option("--separator", required=False, help=f"Statement separator (default: {DEFAULT_SEPARATOR!r}).")
@click.option("--encoding", required=False, help=f"Script encoding (default: {DEFAULT_ENCODING}).")
@click.option("--sqlite", required=False, type=click.Path(), help="Path to a SQLite database file.")
@click.option("--psql-database", required=False, help="PostgreSQL database name, applied with psql.")
@click.option("--psql-user", required=False, help="PostgreSQL user for psql.")
@click.option("--psql-host", required=False, help="PostgreSQL host for psql.")
@click.option("--psql-port", required=False, type=int, default=None, help="PostgreSQL port for psql.")
@click.option(
    "--psql-timeout",
    required=False,
    type=float,
    default=None,
    help="Seconds a single psql statement may run before it counts as failed.",
)
@click.option(
    "--resource-root",
    "resource_roots",
    multiple=True,
    type=click.Path(),
    help="Directory searched for 'classpath:' locations (repeatable, default: current directory).",
)
@click.option(
    "--allow-insecure-http",
    is_flag=True,
    default=None,
    help="Allow HTTP script URLs (insecure). By default only HTTPS URLs are accepted.",
)
@click.option(
    "--download-timeout",
    required=False,
    type=float,
    default=None,
    help="HTTP timeout in seconds for remote scripts.",
)
@click.option("--report-file", required=False, type=click.Path(), help="Write a JSON run report here.")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    config,
    ddl_locations,
    dml_locations,
    continue_on_error,
    separator,
    encoding,
    sqlite,
    psql_database,
    psql_user,
    psql_host,
    psql_port,
    psql_timeout,
    resource_roots,
    allow_insecure_http,
    download_timeout,
    report_file,
    verbose,
    log_file,
):
    """Apply schema and data SQL scripts to a database, in order."""
    logger = logging.getLogger("dbinitializer")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except InitializerError as exc:
        raise click.ClickException(str(exc)) from exc

    ddl_locations = list(_resolve_option(ddl_locations, config_values, "ddl_locations", default=[]))
    dml_locations = list(_resolve_option(dml_locations, config_values, "dml_locations", default=[]))
    continue_on_error = _resolve_option(continue_on_error, config_values, "continue_on_error", default=False)
    separator = _resolve_option(separator, config_values, "separator", default=DEFAULT_SEPARATOR)
    encoding = _resolve_option(encoding, config_values, "encoding", default=DEFAULT_ENCODING)
    sqlite = _resolve_option(sqlite, config_values, "sqlite")
    psql_database = _resolve_option(psql_database, config_values, "psql_database")
    psql_user = _resolve_option(psql_user, config_values, "psql_user")
    psql_host = _resolve_option(psql_host, config_values, "psql_host")
    psql_port = _resolve_option(psql_port, config_values, "psql_port")
    psql_timeout = _resolve_option(psql_timeout, config_values, "psql_timeout")
    resource_roots = list(_resolve_option(resource_roots, config_values, "resource_roots", default=[]))
    allow_insecure_http = _resolve_option(
        allow_insecure_http, config_values, "allow_insecure_http", default=False
    )
    download_timeout = float(
        _resolve_option(
            download_timeout,
            config_values,
            "download_timeout",
            default=DEFAULT_DOWNLOAD_TIMEOUT,
        )
    )
    report_file = _resolve_option(report_file, config_values, "report_file")
    verbose = _resolve_option(verbose, config_values, "verbose", default=False)
    log_file = _resolve_option(log_file, config_values, "log_file")

    if bool(sqlite) == bool(psql_database):
        raise click.ClickException("Provide exactly one database target: '--sqlite' or '--psql-database'.")
    if not ddl_locations and not dml_locations:
        raise click.ClickException("No script locations given. Use '--schema' and/or '--data'.")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        settings = InitializationSettings(
            ddl_locations=ddl_locations,
            dml_locations=dml_locations,
            continue_on_error=continue_on_error,
            separator=separator,
            encoding=encoding,
        )
        if sqlite:
            connection = SqliteConnection(sqlite)
        else:
            connection = PsqlConnection(
                database=psql_database,
                command_runner=CommandRunner(logger=logger),
                user=psql_user,
                host=psql_host,
                port=psql_port,
                timeout=float(psql_timeout) if psql_timeout is not None else None,
            )
    except InitializerError as exc:
        raise click.ClickException(str(exc)) from exc

    content_access = ContentAccessService(
        logger=logger,
        resource_roots=resource_roots or None,
        allow_insecure_http=allow_insecure_http,
        download_timeout=download_timeout,
    )
    initializer = DatabaseInitializer(
        connection,
        content_access=content_access,
        resolver=LocationResolver(content_access, logger=logger),
        report_service=ReportService(report_file, logger=logger) if report_file else None,
        output_console=console,
    )

    with connection:
        try:
            result = initializer.run(settings)
        except InitializerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            raise SystemExit(1) from exc

    if result.failures:
        _print_failures(result)
    console.print(
        f"Statements executed: {result.statements_executed}, failed: {len(result.failures)}"
    )
    raise SystemExit(0 if result.success else 1)


if __name__ == "__main__":
    main()
