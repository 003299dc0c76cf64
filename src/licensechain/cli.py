"""Typer CLI for the LicenseChain SDK."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

app = typer.Typer(name="licensechain", help="LicenseChain SDK: digests, webhook signatures and license checks")
console = Console()


def _read_payload(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] cannot read {path}: {e}")
        raise typer.Exit(1)


@app.command("hash")
def hash_text(
    text: str = typer.Argument(..., help="Text to hash (UTF-8)"),
    algorithm: str = typer.Option("sha256", help="md5 or sha256"),
):
    """Print the hex digest of a string."""
    from licensechain.crypto import md5_hex, sha256_hex

    digests = {"md5": md5_hex, "sha256": sha256_hex}
    fn = digests.get(algorithm.lower())
    if fn is None:
        console.print(f"[bold red]Unknown algorithm:[/bold red] {algorithm}")
        raise typer.Exit(2)
    console.print(fn(text))


@app.command("hmac")
def hmac_text(
    message: str = typer.Argument(..., help="Message to authenticate"),
    secret: str = typer.Option(..., help="Shared secret"),
):
    """Print the HMAC-SHA256 of a string."""
    from licensechain.crypto import hmac_sha256_hex

    console.print(hmac_sha256_hex(message, secret))


@app.command()
def sign(
    payload: Path = typer.Argument(..., help="File holding the raw webhook body"),
    secret: str = typer.Option(..., envvar="LICENSECHAIN_WEBHOOK_SECRET", help="Webhook secret"),
):
    """Compute the signature header value for a webhook body."""
    from licensechain.webhooks.signature import generate_signature

    console.print(generate_signature(_read_payload(payload), secret))


@app.command()
def verify(
    payload: Path = typer.Argument(..., help="File holding the raw webhook body"),
    signature: str = typer.Option(..., help="Signature header value (sha256=...)"),
    secret: str = typer.Option(..., envvar="LICENSECHAIN_WEBHOOK_SECRET", help="Webhook secret"),
):
    """Check a webhook body against its signature."""
    from licensechain.webhooks.signature import SignatureVerifier

    if SignatureVerifier().verify(_read_payload(payload), signature, secret):
        console.print("[bold green]VALID[/bold green] — signature matches")
    else:
        console.print("[bold red]INVALID[/bold red] — signature does not match")
        raise typer.Exit(1)


@app.command()
def hwid(
    user: str = typer.Option("", help="User identifier"),
    app_name: str = typer.Option(..., "--app", help="Application name"),
):
    """Print this machine's hardware ID for a user and app."""
    from licensechain.fingerprint import generate_hardware_id

    console.print(generate_hardware_id(user, app_name))


@app.command()
def validate(
    key: str = typer.Argument(..., help="License key to validate"),
):
    """Validate a license key against the LicenseChain API."""
    from licensechain.client import LicenseChainClient
    from licensechain.common.config import get_settings

    settings = get_settings()
    try:
        client = LicenseChainClient.from_settings(settings)
    except ValueError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(2)

    with client:
        connected = client.connect()
        if not connected.success:
            console.print(f"[bold red]{connected.code}[/bold red] — {connected.message}")
            raise typer.Exit(1)

        result = client.validate_license(key)

    if result.success:
        console.print(f"[bold green]VALID[/bold green] — status {result.data.get('status')}")
        console.print(f"  User: {result.data.get('user')}")
    else:
        console.print(f"[bold red]{result.code}[/bold red] — {result.message}")
        raise typer.Exit(1)


@app.command()
def listen(
    host: Optional[str] = typer.Option(None, help="Bind host"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
):
    """Run a webhook receiver that verifies and logs deliveries."""
    import uvicorn

    from licensechain.common.config import get_settings
    from licensechain.common.logging import setup_logging
    from licensechain.webhooks.router import create_webhook_app
    from licensechain.webhooks.verifier import WebhookVerifier

    settings = get_settings()
    setup_logging(settings.log_level)
    verifier = WebhookVerifier(
        settings.webhook_secret or None,
        api_key=settings.api_key or None,
        verify_signatures=settings.verify_webhooks,
    )
    host = host or settings.webhook_host
    port = port or settings.webhook_port

    console.print(f"[bold green]Listening for webhooks on {host}:{port}[/bold green]")
    uvicorn.run(create_webhook_app(verifier), host=host, port=port)


if __name__ == "__main__":
    app()
