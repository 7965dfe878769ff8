# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""helicone auth: store, inspect and remove credentials."""

import os
from typing import Optional

import click
from rich.markup import escape
from rich.prompt import Prompt

from helicone_library import config
from helicone_library.client import HeliconeClient
from helicone_library.core.constants import MODES, REGIONS

from ..console import console, err_console, fail, info, notice, run_async, success

CHECK = "[green]✓[/green]"
CROSS = "[red]✗[/red]"


async def verify_api_key(api_key: str, region: str) -> Optional[str]:
    """Return None when the key works, else the error text."""
    async with HeliconeClient(api_key, region) as client:
        result = await client.verify_auth()
    return result.error


@click.group("auth")
def auth_group():
    """Manage authentication."""


@auth_group.command("login")
@click.option("--api-key", help="Helicone API key")
@click.option("--region", type=click.Choice(REGIONS), default="us", show_default=True)
def login(api_key: Optional[str], region: str):
    """Verify and store an API key."""
    api_key = api_key or os.environ.get(config.API_KEY_VAR)
    if not api_key:
        api_key = Prompt.ask("Enter your Helicone API key", password=True, console=err_console)
    if not api_key:
        fail("No API key provided")

    with err_console.status("Verifying API key..."):
        error = run_async(verify_api_key(api_key, region))
    if error:
        other = "eu" if region == "us" else "us"
        err_console.print(f"[red]Authentication failed: {escape(error)}[/red]")
        notice(f"Current region: {region.upper()}. Did you mean to use --region {other}?")
        raise SystemExit(1)

    path = config.store_api_key(api_key, region)
    success("Logged in successfully")
    info(f"Credentials stored in {path}")
    info(f"Region: {region.upper()}")


@auth_group.command("logout")
def logout():
    """Remove the stored API key."""
    if not config.has_stored_credentials():
        notice("No stored credentials found")
        return
    config.clear_credentials()
    success("Logged out successfully")
    info(f"Credentials removed from {config.get_config_path()}")


@auth_group.command("gateway")
@click.option("--gateway-url", help="Gateway base URL")
@click.option("--gateway-token", help="Gateway token")
@click.option(
    "--mode",
    type=click.Choice(MODES),
    default="gateway",
    show_default=True,
    help="Default connection mode",
)
def gateway(gateway_url: Optional[str], gateway_token: Optional[str], mode: str):
    """Store gateway credentials for gateway mode."""
    gateway_url = gateway_url or config.get_gateway_url()
    gateway_token = gateway_token or config.get_gateway_token()
    if not gateway_url:
        gateway_url = Prompt.ask("Enter your Gateway URL", console=err_console)
    if not gateway_token:
        gateway_token = Prompt.ask(
            "Enter your Gateway token", password=True, console=err_console
        )
    if not gateway_url or not gateway_token:
        fail("Gateway URL and token are required")

    path = config.store_gateway_credentials(gateway_url, gateway_token, mode)
    success("Gateway credentials saved")
    info(f"Gateway URL: {gateway_url}")
    info(f"Default mode: {mode}")
    info(f"Config: {path}")


@auth_group.command("gateway-logout")
def gateway_logout():
    """Remove stored gateway credentials."""
    stored = config.load_config()
    if not stored.get(config.GATEWAY_URL_VAR) and not stored.get(config.GATEWAY_TOKEN_VAR):
        notice("No stored gateway credentials found")
        return
    config.clear_gateway_credentials()
    success("Gateway credentials removed")
    info(f"Config: {config.get_config_path()}")


@auth_group.command("status")
def status():
    """Show where credentials come from and verify them."""
    api_key = config.get_api_key()
    region = config.get_region()
    mode = config.get_mode()
    gateway_url = config.get_gateway_url()
    gateway_token = config.get_gateway_token()
    has_gateway = bool(gateway_url and gateway_token)

    console.print("\n[bold]Authentication Status[/bold]\n")
    if os.environ.get(config.API_KEY_VAR):
        console.print(f"{CHECK} API Key: [dim](from {config.API_KEY_VAR} environment variable)[/dim]")
    elif config.has_stored_credentials():
        console.print(f"{CHECK} API Key: [dim](from {config.get_config_path()})[/dim]")
    else:
        console.print(f"{CROSS} API Key: [red]Not configured[/red]")
        if not (has_gateway and mode == "gateway"):
            console.print(
                "\n[dim]  Run 'helicone auth login' or set HELICONE_API_KEY environment variable[/dim]"
            )
            return

    console.print(f"  Region: [cyan]{region.upper()}[/cyan]")
    console.print(f"  Mode: [cyan]{mode.upper()}[/cyan]")
    if gateway_url:
        console.print(f"{CHECK} Gateway URL: [dim]{escape(gateway_url)}[/dim]")
    if gateway_token:
        console.print(f"{CHECK} Gateway Token: [dim](stored)[/dim]")

    if api_key:
        with err_console.status("Verifying credentials..."):
            error = run_async(verify_api_key(api_key, region))
        if error:
            err_console.print(f"[red]Invalid credentials: {escape(error)}[/red]")
        else:
            success("Credentials verified")


@auth_group.command("whoami")
def whoami():
    """Show the active API key (masked) and region."""
    api_key = config.get_api_key()
    if not api_key:
        err_console.print("[red]Not logged in[/red]")
        return
    console.print("[bold]Current Configuration:[/bold]")
    console.print(f"  API Key: {config.mask_secret(api_key)}")
    console.print(f"  Region:  {config.get_region().upper()}")
