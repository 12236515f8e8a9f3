"""Command line entry point.

설정 파일로 AuthFlow를 구성해 로그인 / 토큰 갱신 / userinfo 조회를 수행.

    appauth-desktop login --config config.json
    appauth-desktop refresh --refresh-token <token>
    appauth-desktop userinfo --surface system
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from appauth_desktop.config import AuthConfig, load_config
from appauth_desktop.exceptions import AuthenticationError
from appauth_desktop.flows.authorization import AuthorizationRequestHandler
from appauth_desktop.flows.flow import AuthFlow
from appauth_desktop.surfaces.base import BrowserSurface
from appauth_desktop.surfaces.loopback import LoopbackBrowserSurface
from appauth_desktop.surfaces.playwright import PlaywrightWindowSurface
from appauth_desktop.transport import HttpTransport, create_http_client

app = typer.Typer(no_args_is_help=True, help="OAuth 2.0 / OIDC login for desktop apps.")
console = Console()


class SurfaceKind(str, Enum):
    window = "window"
    system = "system"


def _create_surface(kind: SurfaceKind, config: AuthConfig) -> BrowserSurface:
    if kind is SurfaceKind.system:
        return LoopbackBrowserSurface(config.redirect_uri)
    return PlaywrightWindowSurface()


def _token_table(flow: AuthFlow) -> Table:
    table = Table(show_header=False, box=None)
    token = flow.token_response
    table.add_row("Logged in", "yes" if flow.is_logged_in else "no")
    if token is not None:
        table.add_row("Token type", token.token_type)
        table.add_row("Access token", f"{token.access_token[:12]}...")
        table.add_row("Refresh token", "present" if token.refresh_token else "none")
        if token.expires_at:
            table.add_row("Expires at", token.expires_at.isoformat(timespec="seconds"))
        if token.scope:
            table.add_row("Scope", token.scope)
    return table


def _run(
    config_path: Optional[Path],
    surface: SurfaceKind,
    action: Callable[[AuthFlow], Awaitable[None]],
    refresh_token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> None:
    try:
        config = load_config(config_path)
    except AuthenticationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    async def main() -> None:
        async with create_http_client(config) as client:
            flow = AuthFlow(
                config,
                HttpTransport(client),
                AuthorizationRequestHandler(_create_surface(surface, config)),
                refresh_token=refresh_token,
                authorization_timeout=timeout,
            )
            await action(flow)

    try:
        asyncio.run(main())
    except AuthenticationError as e:
        console.print(f"[red]Authentication failed: {e}[/red]")
        raise typer.Exit(code=1) from None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def login(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config JSON file."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Login hint."),
    surface: SurfaceKind = typer.Option(SurfaceKind.window, help="Browser surface to use."),
    timeout: Optional[float] = typer.Option(None, help="Seconds to wait for the redirect."),
) -> None:
    """Sign in interactively and show the token summary."""

    async def action(flow: AuthFlow) -> None:
        await flow.sign_in(username)
        console.print(Panel.fit(_token_table(flow), title="[OK] Signed in", border_style="green"))

    _run(config_path, surface, action, timeout=timeout)


@app.command()
def refresh(
    refresh_token: str = typer.Option(..., "--refresh-token", "-r", help="Refresh token."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config JSON file."),
) -> None:
    """Exchange a refresh token for a new access token."""

    async def action(flow: AuthFlow) -> None:
        await flow.update_access_token()
        console.print(Panel.fit(_token_table(flow), title="[OK] Refreshed", border_style="green"))

    _run(config_path, SurfaceKind.window, action, refresh_token=refresh_token)


@app.command()
def userinfo(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config JSON file."),
    surface: SurfaceKind = typer.Option(SurfaceKind.window, help="Browser surface to use."),
) -> None:
    """Sign in, then print the provider's userinfo claims."""

    async def action(flow: AuthFlow) -> None:
        await flow.sign_in()
        info = await flow.fetch_user_info()
        table = Table("Claim", "Value")
        for key, value in info.items():
            table.add_row(key, str(value))
        name = info.get("name") or info.get("sub", "")
        console.print(Panel.fit(table, title=f"Welcome {name}", border_style="cyan"))

    _run(config_path, surface, action)


if __name__ == "__main__":
    app()
