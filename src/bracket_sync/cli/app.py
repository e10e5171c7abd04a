from __future__ import annotations

import typer

from bracket_sync.cli.bracket import bracket_cmd, detail_cmd, refresh_cmd, watch_cmd

app = typer.Typer(no_args_is_help=True, help="Tournament bracket synchronization engine.")
app.command("bracket")(bracket_cmd)
app.command("refresh")(refresh_cmd)
app.command("watch")(watch_cmd)
app.command("detail")(detail_cmd)
