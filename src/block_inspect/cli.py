"""
Block Inspect CLI

Inspects TSDB blocks stored in object storage:
- bucket ls: List blocks in a bucket, as names, JSON or a custom template
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .cli_context import CLIContext
from .errors import SetupFailed
from .operations import Operations, OpsConfig, run_and_exit
from .operations.printers import print_ls_summary
from .storage.uri import join_prefix

app = typer.Typer(name="block-inspect", help="Inspect TSDB blocks in object storage")
bucket_app = typer.Typer(help="Inspect metric data in an object storage bucket")
app.add_typer(bucket_app, name="bucket")


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # SDK wire logging is noise even in verbose mode
    for name in ("azure", "botocore", "boto3", "google", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Inspect TSDB blocks in object storage."""
    _configure_logging(verbose)
    ctx.obj = {"verbose": verbose}


@bucket_app.callback()
def bucket(
    ctx: typer.Context,
    bucket_uri: str = typer.Option(
        ..., "--bucket", envvar="BLOCK_INSPECT_BUCKET", metavar="<bucket>",
        help="Bucket holding the blocks: az://container[/prefix], s3://bucket[/prefix], gs://bucket[/prefix], file:///dir or a bare name",
    ),
) -> None:
    """Inspect metric data in an object storage bucket."""
    ctx.ensure_object(dict)
    ctx.obj["bucket"] = bucket_uri


@bucket_app.command("ls")
def ls(
    ctx: typer.Context,
    output: str = typer.Option(
        "", "--output", "-o",
        help="Format in which to print each block's information; may be 'json' or a custom template",
    ),
    prefix: str = typer.Option("", "--prefix", help="List blocks under this prefix"),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Time budget for the whole listing in seconds [default: BLOCK_INSPECT_WALK_TIMEOUT or 300]",
    ),
) -> None:
    """List all blocks in the bucket."""
    verbose = ctx.obj.get("verbose", False)

    def _ls() -> None:
        context = CLIContext.from_env(ctx.obj["bucket"])
        try:
            full_prefix = join_prefix(context.bucket_uri.prefix, prefix)
        except ValueError as e:
            raise SetupFailed(str(e)) from e

        config = OpsConfig(
            timeout_s=timeout if timeout is not None else context.settings.walk_timeout_s,
            prefix=full_prefix,
            verbose=verbose,
        )
        ops = Operations(config=config, bucket_factory=lambda: context.bucket)
        count = ops.ls(output, out=sys.stdout)
        if verbose:
            print_ls_summary(count, ops.bucket.name)

    run_and_exit(_ls)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
