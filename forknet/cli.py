import asyncio
import logging
import os
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from forknet.chains import CHAIN_IDS, rpc_env_var
from forknet.errors import ForknetError
from forknet.settings import DEFAULT_CHAIN, Settings, load_env
from forknet.supervisor.forks import ForkManager, parse_chain_list

app = typer.Typer(help="Run local chain forks behind a single glue RPC aggregator.")

logger = logging.getLogger("forknet.cli")

T = TypeVar("T")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Load .env and configure logging before any command runs."""
    configure_logging(verbose)
    load_env()


def _build_manager() -> ForkManager:
    return ForkManager(Settings.from_env())


def _run(operation: Callable[[ForkManager], Awaitable[T]]) -> T:
    """Run one manager operation, mapping known failures to exit code 1."""
    manager = _build_manager()
    try:
        return asyncio.run(operation(manager))
    except ForknetError as exc:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command("start-fork")
def start_fork(
    chain: str = typer.Option(DEFAULT_CHAIN, "--chain", help="chain alias"),
    port: Optional[int] = typer.Option(None, "--port", help="port to start on"),
    extra_args: str = typer.Option("", "--args", help="extra arguments for the fork binary"),
):
    """Start a fork of a chain."""
    record = _run(lambda manager: manager.start_fork(chain=chain, port=port, extra_args=extra_args))
    typer.echo(f"started new fork: chain: {record.chain} - port: {record.port} - pid: {record.pid}")


@app.command("start-forks")
def start_forks(
    chains: str = typer.Option(..., "--chains", help="comma-separated list of chains"),
):
    """Start forks of multiple chains."""
    chain_list = parse_chain_list(chains)
    if not chain_list:
        typer.echo("Error: no chains given", err=True)
        raise typer.Exit(code=1)
    records = _run(lambda manager: manager.start_forks(chain_list))
    for record in records:
        typer.echo(f"started new fork: chain: {record.chain} - port: {record.port} - pid: {record.pid}")


@app.command("list-forks")
def list_forks():
    """List all running forks."""
    records = _run(lambda manager: manager.list_forks())
    if not records:
        typer.echo("No running forks.")
        return
    for record in records:
        typer.echo(f"chain: {record.chain} - port: {record.port} - pid: {record.pid}")


@app.command("stop-fork")
def stop_fork(chain: str = typer.Option(..., "--chain", help="chain alias")):
    """Stop the fork of one chain."""
    record = _run(lambda manager: manager.stop_fork(chain))
    if record is None:
        typer.echo(f"no pid found: {chain}")
        return
    typer.echo(f"stopped fork: chain: {record.chain} - pid: {record.pid}")


@app.command("stop-all-forks")
def stop_all_forks():
    """Stop every running fork and the glue service."""
    records = _run(lambda manager: manager.stop_all_forks())
    for record in records:
        typer.echo(f"stopped fork: chain: {record.chain} - pid: {record.pid}")
    typer.echo(f"Stopped {len(records)} fork(s).")


@app.command("start-glue")
def start_glue():
    """Regenerate the glue config and (re)start the glue service."""
    pid = _run(lambda manager: manager.start_glue())
    typer.echo(f"Glue started (PID: {pid})")


@app.command("stop-glue")
def stop_glue():
    """Stop the glue service."""
    stopped = _run(lambda manager: manager.stop_glue())
    if stopped:
        typer.echo("Glue stopped.")
    else:
        typer.echo("Glue not running.")


@app.command("chains")
def chains():
    """List known chain aliases and whether an upstream RPC is configured."""
    for alias, chain_id in CHAIN_IDS.items():
        env_var = rpc_env_var(alias)
        configured = "yes" if os.environ.get(env_var, "").strip() else "no"
        typer.echo(f"{alias}: id={int(chain_id)} rpc={configured} ({env_var})")


if __name__ == "__main__":
    app()
