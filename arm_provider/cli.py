"""
Command line interface for the Azure Resource Manager provider.

Drives single resources and data sources directly, without an orchestration
layer. Configuration files are YAML (JSON is accepted as a subset).

Examples:
    arm-provider resources
    arm-provider schema azurerm_cosmosdb_sql_trigger
    arm-provider apply azurerm_cosmosdb_sql_trigger trigger.yaml
    arm-provider import azurerm_cosmosdb_sql_trigger /subscriptions/.../triggers/t1
    arm-provider destroy azurerm_cosmosdb_sql_trigger /subscriptions/.../triggers/t1
"""

import functools
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config_manager import LoggingConfig, create_config_from_env, setup_logging
from .exceptions import ArmProviderError
from .handlers import HandlerRegistry
from .provider import Provider
from .schema import describe_schema, redact

console = Console(stderr=True)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _emit_state(resource_type: str, state: Dict[str, Any], data_source: bool = False) -> None:
    handler_class = (
        HandlerRegistry.get_data_source(resource_type)
        if data_source
        else HandlerRegistry.get_resource(resource_type)
    )
    if handler_class is not None:
        state = redact(handler_class.SCHEMA, state)
    click.echo(json.dumps(_jsonable(state), indent=2, sort_keys=True))


def _load_config_file(path: str) -> Dict[str, Any]:
    content = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(content, dict):
        raise click.BadParameter(
            f"{path} must contain a mapping of attribute names to values"
        )
    return content


def _get_provider(ctx: click.Context) -> Provider:
    provider: Optional[Provider] = ctx.obj.get("provider")
    if provider is None:
        config = create_config_from_env(
            subscription_id=ctx.obj.get("subscription_id"),
            log_level=ctx.obj.get("log_level"),
        )
        if ctx.obj.get("debug"):
            config.log_configuration_summary()
        provider = Provider.from_config(config)
        ctx.obj["provider"] = provider
    return provider


def provider_errors(f: Callable[..., Any]) -> Callable[..., Any]:
    """Report provider errors on the console and exit non-zero."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except ArmProviderError as e:
            console.print(f"[red]❌ {escape(e.message)}[/red]", soft_wrap=True)
            if e.recovery_suggestion:
                console.print(
                    f"[yellow]💡 {escape(e.recovery_suggestion)}[/yellow]", soft_wrap=True
                )
            sys.exit(1)

    return wrapper


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    help="Logging level (DEBUG, INFO, WARNING, ERROR)",
)
@click.option(
    "--subscription-id",
    required=False,
    help="Azure subscription ID (defaults to ARM_SUBSCRIPTION_ID from .env)",
)
@click.option("--debug", is_flag=True, help="Log the resolved configuration")
@click.pass_context
def cli(ctx: click.Context, log_level: str, subscription_id: Optional[str], debug: bool) -> None:
    """Azure Resource Manager provider for Cosmos DB SQL, MSSQL TDE and HDInsight."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level.upper()
    ctx.obj["subscription_id"] = subscription_id
    ctx.obj["debug"] = debug
    setup_logging(LoggingConfig(level=log_level))


@cli.command()
def resources() -> None:
    """List the supported resource and data source types."""
    table = Table(title="Supported Types")
    table.add_column("Type", style="cyan")
    table.add_column("Kind", style="green")
    for name in HandlerRegistry.resource_types():
        table.add_row(name, "resource")
    for name in HandlerRegistry.data_source_types():
        table.add_row(name, "data source")
    Console().print(table)


@cli.command()
@click.argument("type_name")
@click.option("--data-source", is_flag=True, help="Describe the data source of this type")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def schema(type_name: str, data_source: bool, output_json: bool) -> None:
    """Show the configuration schema of TYPE_NAME."""
    handler_class = (
        HandlerRegistry.get_data_source(type_name)
        if data_source
        else HandlerRegistry.get_resource(type_name)
    )
    if handler_class is None:
        kind = "data source" if data_source else "resource"
        console.print(f"[red]❌ Unknown {kind} type: {type_name}[/red]")
        sys.exit(1)

    described = describe_schema(handler_class.SCHEMA)
    if output_json:
        click.echo(json.dumps(described, indent=2))
        return

    table = Table(title=type_name)
    table.add_column("Attribute", style="cyan")
    table.add_column("Type")
    table.add_column("Flags", style="green")
    table.add_column("Validators", style="dim")
    for name, entry in described.items():
        flags = [
            flag
            for flag in ("required", "optional", "computed", "force_new", "sensitive")
            if entry.get(flag)
        ]
        table.add_row(name, entry["type"], ", ".join(flags), ", ".join(entry["validators"]))
    Console().print(table)


@cli.command(name="import")
@click.argument("type_name")
@click.argument("resource_id")
@click.pass_context
@provider_errors
def import_command(ctx: click.Context, type_name: str, resource_id: str) -> None:
    """Read the existing object RESOURCE_ID into state."""
    state = _get_provider(ctx).import_resource(type_name, resource_id)
    _emit_state(type_name, state)


@cli.command()
@click.argument("type_name")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--id", "resource_id", help="ID of an existing object to converge")
@click.pass_context
@provider_errors
def apply(ctx: click.Context, type_name: str, config_file: str, resource_id: Optional[str]) -> None:
    """Create TYPE_NAME from CONFIG_FILE, or converge the object given by --id."""
    provider = _get_provider(ctx)
    raw = _load_config_file(config_file)
    prior = provider.import_resource(type_name, resource_id) if resource_id else None
    state = provider.apply(type_name, raw, prior)
    console.print(f"[green]✅ Applied {type_name} {state.get('id', '')}[/green]")
    _emit_state(type_name, state)


@cli.command()
@click.argument("type_name")
@click.argument("resource_id")
@click.pass_context
@provider_errors
def destroy(ctx: click.Context, type_name: str, resource_id: str) -> None:
    """Delete the object RESOURCE_ID; an already missing object is not an error."""
    provider = _get_provider(ctx)
    handler = provider.resource_handler(type_name)
    parsed = handler.validate_import_id(resource_id)
    provider.delete(type_name, {"id": parsed.id()})
    console.print(f"[green]✅ Destroyed {type_name} {parsed.id()}[/green]")


@cli.command()
@click.argument("type_name")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@provider_errors
def data(ctx: click.Context, type_name: str, config_file: str) -> None:
    """Read the data source TYPE_NAME configured by CONFIG_FILE."""
    state = _get_provider(ctx).read_data_source(type_name, _load_config_file(config_file))
    _emit_state(type_name, state, data_source=True)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
