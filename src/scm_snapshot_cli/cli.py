from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from scm_snapshot_core.config import load_config
from scm_snapshot_core.errors import ConfigError
from scm_snapshot_core.log import configure_logging

from .util import CliState, fail

app = typer.Typer(help="scm-snapshot: reproduce exact source snapshots from version control")


@app.callback()
def _init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a scm-snapshot.toml file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show verbose progress and debug logs"),
):
    try:
        settings = load_config(config)
    except ConfigError as exc:
        fail(str(exc), code=2)
    configure_logging("debug" if verbose else settings.log.verbosity)
    ctx.obj = CliState(config=settings, verbose=verbose)


# Subcommands are defined in commands/*.py
from .commands import doctor as doctor_cmd  # noqa: E402
from .commands import fetch as fetch_cmd  # noqa: E402
from .commands import snapshot as snapshot_cmd  # noqa: E402

app.command(name="capture")(snapshot_cmd.capture)
app.command(name="validate")(snapshot_cmd.validate)
app.command(name="folder-name")(snapshot_cmd.folder_name)
app.command(name="source-path")(snapshot_cmd.source_path)
app.command(name="fetch")(fetch_cmd.fetch)
app.command(name="restore")(fetch_cmd.restore)
app.command(name="doctor")(doctor_cmd.doctor)


def main():
    app()
