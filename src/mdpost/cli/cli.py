"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated

import typer

from mdpost.cli.commands import diff_cmd, export_cmd, index_cmd, init_cmd, lint_cmd, list_cmd
from mdpost.log import configure_logging


app = typer.Typer(name="mdpost", no_args_is_help=True, help="Front-matter blog post lint and catalog tool")


@app.callback()
def main(
    log_level: Annotated[str, typer.Option("--log-level", envvar="MDPOST_LOG_LEVEL", help="Logging level")] = "WARNING",
    ):
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")


app.command(name="lint")(lint_cmd)
app.command(name="index")(index_cmd)
app.command(name="list")(list_cmd)
app.command(name="export")(export_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="init")(init_cmd)
