"""
Command Line Interface for ContainerUI.
"""
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from ..exceptions import ContainerUIError
from ..MANAGERS.catalog_client import CatalogClient
from ..MANAGERS.polling_coordinator import PollingCoordinator
from ..MODELS.catalog import Snapshot
from ..PARSERS.settings_parser import SettingsParser
from ..RUNNERS.command_executor import CommandExecutor
from ..UTILS.logging_setup import configure_logging


def _call(operation: Callable[..., Any], *args: Any) -> Any:
    try:
        return operation(*args)
    except ContainerUIError as e:
        raise click.ClickException(str(e)) from e


def _table(headers: List[str], rows: List[Tuple[str, ...]]) -> None:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]
    click.echo("  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip())
    for row in rows:
        click.echo("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())


@click.group()
@click.option('--config', '-c', 'config_path', default=None, help='YAML settings file')
@click.option('--binary', '-b', default=None, help='Path to the runtime CLI')
@click.option('--timeout', type=float, default=None, help='Per-command timeout in seconds')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, binary, timeout, verbose):
    """
    ContainerUI - inspect and control a container runtime through its CLI.
    """
    ctx.ensure_object(dict)
    overrides: Dict[str, Any] = {"binary": binary, "command_timeout": timeout}
    if verbose:
        overrides["log_level"] = "DEBUG"
    try:
        settings = SettingsParser().load(config_path=config_path, overrides=overrides)
    except ContainerUIError as e:
        raise click.ClickException(str(e)) from e

    configure_logging(settings.log_level)
    ctx.obj['settings'] = settings
    if 'client' not in ctx.obj:
        executor = CommandExecutor(settings.binary, timeout=settings.command_timeout)
        ctx.obj['client'] = CatalogClient(executor)


@cli.command()
@click.pass_context
def status(ctx):
    """Show the runtime system status."""
    client: CatalogClient = ctx.obj['client']
    line = _call(client.system_status)
    state = "running" if client.is_system_running(line) else "not running"
    click.echo(f"{line} ({state})")


@cli.command()
@click.pass_context
def ps(ctx):
    """List all containers."""
    containers = _call(ctx.obj['client'].list_containers)
    _table(
        ["ID", "IMAGE", "OS", "ARCH", "STATE", "ADDR"],
        [(c.id, c.image, c.os or "", c.arch or "", c.state, c.addr or "") for c in containers],
    )


@cli.command()
@click.pass_context
def images(ctx):
    """List local images."""
    _table(["REFERENCE", "SIZE"], [(i.id, i.size or "") for i in _call(ctx.obj['client'].list_images)])


@cli.command()
@click.pass_context
def volumes(ctx):
    """List volumes."""
    rows = [(v.id, v.driver or "", v.mountpoint or "") for v in _call(ctx.obj['client'].list_volumes)]
    _table(["NAME", "DRIVER", "MOUNTPOINT"], rows)


@cli.command()
@click.argument('container_id')
@click.pass_context
def start(ctx, container_id):
    """Start a container."""
    _call(ctx.obj['client'].start_container, container_id)
    click.echo(f"Started {container_id}")


@cli.command()
@click.argument('container_id')
@click.pass_context
def stop(ctx, container_id):
    """Stop a container."""
    _call(ctx.obj['client'].stop_container, container_id)
    click.echo(f"Stopped {container_id}")


@cli.command()
@click.argument('container_id')
@click.pass_context
def restart(ctx, container_id):
    """Stop then start a container."""
    _call(ctx.obj['client'].restart_container, container_id)
    click.echo(f"Restarted {container_id}")


@cli.command()
@click.argument('container_id')
@click.pass_context
def rm(ctx, container_id):
    """Delete a container."""
    _call(ctx.obj['client'].delete_container, container_id)
    click.echo(f"Deleted {container_id}")


def _parse_mappings(values: Tuple[str, ...]) -> Dict[str, str]:
    mappings = {}
    for value in values:
        volume, sep, target = value.partition(':')
        if not sep:
            raise click.BadParameter(f"expected VOLUME:TARGET, got {value!r}", param_hint='--volume')
        mappings[volume] = target
    return mappings


@cli.command()
@click.option('--name', '-n', required=True, help='Container name')
@click.option('--volume', 'volume_specs', multiple=True, help='VOLUME:TARGET mapping (repeatable)')
@click.argument('image')
@click.pass_context
def create(ctx, name, volume_specs, image):
    """Create a container from an image."""
    _call(ctx.obj['client'].create_container, name, image, _parse_mappings(volume_specs))
    click.echo(f"Created {name}")


@cli.group()
def volume():
    """Manage volumes."""


@volume.command('create')
@click.argument('name')
@click.option('--size', '-s', default=None, help='Volume size, e.g. 10G')
@click.option('--opt', 'options', multiple=True, help='Driver option KEY=VALUE (repeatable)')
@click.option('--label', 'labels', multiple=True, help='Label KEY=VALUE (repeatable)')
@click.pass_context
def volume_create(ctx, name, size, options, labels):
    """Create a volume."""
    _call(ctx.obj['client'].create_volume, name, size, options, labels)
    click.echo(f"Created volume {name}")


@volume.command('rm')
@click.argument('name')
@click.pass_context
def volume_rm(ctx, name):
    """Delete a volume."""
    _call(ctx.obj['client'].delete_volume, name)
    click.echo(f"Deleted volume {name}")


@cli.group()
def system():
    """Start or stop the runtime system."""


@system.command('start')
@click.pass_context
def system_start(ctx):
    """Start the runtime system."""
    _call(ctx.obj['client'].start_system)
    click.echo("System started")


@system.command('stop')
@click.pass_context
def system_stop(ctx):
    """Stop the runtime system."""
    _call(ctx.obj['client'].stop_system)
    click.echo("System stopped")


def _summary(snapshot: Snapshot) -> str:
    if snapshot.error:
        return f"Error: {snapshot.error}"
    return (f"{snapshot.system_status} | containers: {len(snapshot.containers)} "
            f"({snapshot.running_container_count} running) | images: {len(snapshot.images)} "
            f"| volumes: {len(snapshot.volumes)}")


@cli.command()
@click.option('--interval', '-i', type=float, default=None, help='Seconds between refreshes')
@click.option('--count', type=int, default=None, help='Exit after this many snapshots')
@click.pass_context
def watch(ctx, interval, count):
    """Poll the runtime and print a summary of every snapshot."""
    settings = ctx.obj['settings']
    coordinator = PollingCoordinator(
        ctx.obj['client'],
        interval=interval or settings.poll_interval,
        max_workers=settings.max_workers,
    )
    done = threading.Event()
    seen = [0]

    def on_snapshot(snapshot: Snapshot):
        if done.is_set():
            return
        click.echo(_summary(snapshot))
        seen[0] += 1
        if count is not None and seen[0] >= count:
            done.set()

    coordinator.subscribe(on_snapshot)
    try:
        coordinator.start_polling()
        while not done.wait(0.2):
            pass
    except KeyboardInterrupt:
        click.echo("\nStopping...")
    finally:
        coordinator.close()


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
