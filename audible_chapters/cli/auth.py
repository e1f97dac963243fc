"""
Authentication CLI commands.

- generate: Log in, register a device and print (or save) ADP_TOKEN / PRIVATE_KEY
"""

from pathlib import Path

import typer
from pydantic import ValidationError as PydanticValidationError

from ..auth import AudibleAuthFlow, Credentials, generate_config_string, save_config_to_file
from ..config import get_settings
from ..exceptions import AudibleError
from .common import Icons, console, fail, run_async, ui

auth_app = typer.Typer(help="🔑 Device authentication commands")


@auth_app.command("generate")
def auth_generate(
    email: str | None = typer.Option(None, "--email", "-e", help="Audible account email"),
    password: str | None = typer.Option(None, "--password", "-p", help="Audible account password"),
    region: str = typer.Option("us", "--region", "-c", help="Marketplace region (us, uk, de, etc.)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the config block to this file (0600)"),
):
    """
    Register a new device and generate ADP_TOKEN / PRIVATE_KEY.

    Prompts for email and password when they are not given as options.
    The password is used once and never stored.
    """
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    try:
        credentials = Credentials(email=email, password=password, region=region)
    except AudibleError as e:
        fail(e)
    except PydanticValidationError as e:
        fail(f"Invalid credentials: {e.errors()[0]['msg']}")

    ui.header("Audible Device Registration", subtitle=f"Marketplace: {credentials.region}", icon=Icons.KEY)
    flow = AudibleAuthFlow(settings=get_settings().audible)

    with ui.spinner(f"Registering device with Audible ({credentials.region})..."):
        result = run_async(flow.authenticate(credentials))

    if not result.success or not result.adp_token or not result.private_key:
        fail(result.message or "Authentication failed")

    ui.success("Device registered")

    if output is not None:
        if not save_config_to_file(result.adp_token, result.private_key, output):
            fail(f"Could not write configuration to {output}")
        console.print(f"  {Icons.FILE} Saved to: [accent]{output}[/accent]")
        return

    typer.echo(generate_config_string(result.adp_token, result.private_key))
