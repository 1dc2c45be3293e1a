"""Node-side entry point: run the decision engine and print the outcome as JSON.

Invoked by SshChannel as ``python -m ama_mitigator.agent --settings <token>``.
Logs go to stderr; stdout carries exactly one JSON line.
"""

from typing import Optional

import typer

from .config import MitigationSettings
from .host import PsutilHost
from .mitigation import MitigationEngine
from .remote.channel import decode_settings

app = typer.Typer(add_completion=False)


@app.command()
def main(
    settings: Optional[str] = typer.Option(
        None, "--settings", help="Base64 engine settings produced by the controller"
    ),
):
    """Run the mitigation on this machine."""
    engine_settings = decode_settings(settings) if settings else MitigationSettings()
    outcome = MitigationEngine(PsutilHost(), engine_settings).run()
    typer.echo(outcome.model_dump_json())


if __name__ == "__main__":
    app()
