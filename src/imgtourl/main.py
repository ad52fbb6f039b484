"""Main entry point for the imgtourl CLI.

Provides a Typer-based CLI that uploads an image to Cloudflare R2 and
prints the resulting public URL (plus key, bucket, size and type) as JSON.
"""

import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from imgtourl import __version__
from imgtourl.config import UploaderConfig, get_config_path
from imgtourl.logging_config import setup_logging
from imgtourl.services.r2 import R2ImageClient, UploadOptions, UploadResult

console = Console()
err_console = Console(stderr=True)

# Create the main Typer app
app = typer.Typer(
    name="imgtourl",
    help="Upload images to Cloudflare R2 and get a public URL",
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"imgtourl version {__version__}")
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]imgtourl: {escape(message)}[/red]", soft_wrap=True)
    raise typer.Exit(1)


def _parse_meta(pairs: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict."""
    metadata: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid metadata '{pair}'. Use KEY=VALUE.")
        metadata[key.strip()] = value
    return metadata


def _build_client(
    config_path: Optional[Path],
    account: Optional[str],
    access_key: Optional[str],
    secret_key: Optional[str],
    bucket: Optional[str],
    public_url: Optional[str],
    prefix: Optional[str],
    max_size: Optional[str],
) -> R2ImageClient:
    config = UploaderConfig.load_or_default(config_path)
    config.apply_overrides(
        account_id=account,
        access_key_id=access_key,
        secret_access_key=secret_key,
        bucket=bucket,
        public_url=public_url,
        key_prefix=prefix,
        max_size_bytes=max_size,
    )
    return R2ImageClient(config)


def _print_result(result: UploadResult) -> None:
    typer.echo(json.dumps(result.to_dict(), indent=2))


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Log debug output to stderr",
    ),
    log_dir: Path = typer.Option(
        None,
        "--log-dir",
        help="Also write a session log to this directory",
    ),
) -> None:
    """imgtourl: Upload images to Cloudflare R2 and get a public URL.

    ## Commands

    * [bold cyan]upload[/bold cyan] - Upload an image file
    * [bold cyan]upload-base64[/bold cyan] - Upload a base64 string or data URI
    * [bold cyan]config[/bold cyan] - Show or edit configuration

    ## Getting Started

    1. Export credentials:
       [dim]$ export R2_ACCOUNT_ID=... R2_ACCESS_KEY_ID=... R2_SECRET_ACCESS_KEY=...[/dim]

    2. Upload an image:
       [dim]$ imgtourl upload ./cat.png --bucket my-bucket --public-url https://cdn.example.com[/dim]
    """
    try:
        setup_logging(log_dir=log_dir, verbose=verbose)
    except OSError as e:
        _fail(f"Cannot write log file in {log_dir}: {e}")


@app.command("upload")
def upload(
    image_path: Path = typer.Argument(
        ...,
        help="Path of the image to upload",
    ),
    account: str = typer.Option(
        None,
        "--account",
        "-a",
        help="Cloudflare R2 account id (env: R2_ACCOUNT_ID / IMGTOURL_ACCOUNT_ID)",
    ),
    access_key: str = typer.Option(
        None,
        "--access-key",
        help="R2 access key id (env: R2_ACCESS_KEY_ID / IMGTOURL_ACCESS_KEY_ID)",
    ),
    secret_key: str = typer.Option(
        None,
        "--secret-key",
        help="R2 secret access key (env: R2_SECRET_ACCESS_KEY / IMGTOURL_SECRET_ACCESS_KEY)",
    ),
    bucket: str = typer.Option(
        None,
        "--bucket",
        "-b",
        help="Target bucket name (env: R2_BUCKET_NAME / IMGTOURL_BUCKET)",
    ),
    public_url: str = typer.Option(
        None,
        "--public-url",
        help="Public base URL for the bucket (env: R2_PUBLIC_URL / IMGTOURL_PUBLIC_URL)",
    ),
    prefix: str = typer.Option(
        None,
        "--prefix",
        help="Key prefix for generated keys (env: IMGTOURL_PREFIX, default: images)",
    ),
    max_size: str = typer.Option(
        None,
        "--max-size",
        help="Max size in bytes (env: IMGTOURL_MAX_SIZE, default: 2MB)",
    ),
    key: str = typer.Option(
        None,
        "--key",
        help="Custom object key; overrides the generated key",
    ),
    name: str = typer.Option(
        None,
        "--name",
        "-n",
        help="Override the original filename metadata",
    ),
    content_type: str = typer.Option(
        None,
        "--content-type",
        help="Force a content type (must start with image/)",
    ),
    meta: Optional[list[str]] = typer.Option(
        None,
        "--meta",
        "-m",
        help="Extra object metadata as KEY=VALUE (repeatable)",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Upload an image file and print the result as JSON.

    Examples:
        imgtourl upload ./cat.png
        imgtourl upload ./cat.png --bucket my-bucket --public-url https://cdn.example.com
    """
    try:
        options = UploadOptions(
            key=key,
            original_name=name,
            content_type=content_type,
            metadata=_parse_meta(meta),
        )
        client = _build_client(
            config_path, account, access_key, secret_key, bucket, public_url, prefix, max_size
        )
        result = client.upload_file(image_path.resolve(), options)
    except (ValueError, OSError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    _print_result(result)


@app.command("upload-base64")
def upload_base64(
    data: str = typer.Argument(
        ...,
        help="Base64 string or data URI; use - to read from stdin",
    ),
    account: str = typer.Option(
        None,
        "--account",
        "-a",
        help="Cloudflare R2 account id (env: R2_ACCOUNT_ID / IMGTOURL_ACCOUNT_ID)",
    ),
    access_key: str = typer.Option(
        None,
        "--access-key",
        help="R2 access key id (env: R2_ACCESS_KEY_ID / IMGTOURL_ACCESS_KEY_ID)",
    ),
    secret_key: str = typer.Option(
        None,
        "--secret-key",
        help="R2 secret access key (env: R2_SECRET_ACCESS_KEY / IMGTOURL_SECRET_ACCESS_KEY)",
    ),
    bucket: str = typer.Option(
        None,
        "--bucket",
        "-b",
        help="Target bucket name (env: R2_BUCKET_NAME / IMGTOURL_BUCKET)",
    ),
    public_url: str = typer.Option(
        None,
        "--public-url",
        help="Public base URL for the bucket (env: R2_PUBLIC_URL / IMGTOURL_PUBLIC_URL)",
    ),
    prefix: str = typer.Option(
        None,
        "--prefix",
        help="Key prefix for generated keys (env: IMGTOURL_PREFIX, default: images)",
    ),
    max_size: str = typer.Option(
        None,
        "--max-size",
        help="Max size in bytes (env: IMGTOURL_MAX_SIZE, default: 2MB)",
    ),
    key: str = typer.Option(
        None,
        "--key",
        help="Custom object key; overrides the generated key",
    ),
    name: str = typer.Option(
        None,
        "--name",
        "-n",
        help="Original filename to record in metadata",
    ),
    content_type: str = typer.Option(
        None,
        "--content-type",
        help="Force a content type (must start with image/)",
    ),
    meta: Optional[list[str]] = typer.Option(
        None,
        "--meta",
        "-m",
        help="Extra object metadata as KEY=VALUE (repeatable)",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Upload a base64-encoded image or data URI and print the result as JSON.

    Examples:
        imgtourl upload-base64 "data:image/png;base64,iVBORw0KGgo..."
        base64 cat.png | imgtourl upload-base64 - --name cat.png
    """
    if data == "-":
        data = sys.stdin.read()

    try:
        options = UploadOptions(
            key=key,
            original_name=name,
            content_type=content_type,
            metadata=_parse_meta(meta),
        )
        client = _build_client(
            config_path, account, access_key, secret_key, bucket, public_url, prefix, max_size
        )
        result = client.upload_base64(data, options)
    except (ValueError, OSError, ClientError, BotoCoreError) as e:
        _fail(str(e))

    _print_result(result)


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for set action)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Manage configuration.

    Show, set, or display the path to the configuration file. Credentials
    are read from the environment and are never stored in the file.

    Examples:
        imgtourl config show                 # Show effective configuration
        imgtourl config set r2.bucket my-bucket
        imgtourl config path                 # Show config file path
    """
    path = config_path or get_config_path()

    if action == "show":
        try:
            if config_path is not None or path.exists():
                cfg = UploaderConfig.load(path)
            else:
                cfg = UploaderConfig.from_env()
        except (ValueError, OSError) as e:
            console.print(f"[red]Error loading config: {escape(str(e))}[/red]", soft_wrap=True)
            raise typer.Exit(1)

        shown = cfg.masked()
        table = Panel.fit(
            f"[cyan]Account ID:[/cyan] {escape(shown['account_id']) or '(not set)'}\n"
            f"[cyan]Access Key:[/cyan] {escape(shown['access_key_id']) or '(not set)'}\n"
            f"[cyan]Secret Key:[/cyan] {escape(shown['secret_access_key']) or '(not set)'}\n"
            f"[cyan]Bucket:[/cyan] {escape(shown['bucket']) or '(not set)'}\n"
            f"[cyan]Public URL:[/cyan] {escape(shown['public_url']) or '(not set)'}\n"
            f"[cyan]Endpoint:[/cyan] {escape(cfg.endpoint())}\n"
            f"[cyan]Region:[/cyan] {escape(shown['region'])}\n"
            f"[cyan]Key Prefix:[/cyan] {escape(shown['key_prefix']) or '(none)'}\n"
            f"[cyan]Max Size:[/cyan] {cfg.max_size_bytes:,} bytes\n"
            f"[cyan]Cache-Control:[/cyan] {escape(shown['cache_control'])}",
            title="Configuration",
            border_style="green",
        )
        console.print(table)

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: imgtourl config set <key> <value>[/red]")
            raise typer.Exit(1)

        try:
            cfg = UploaderConfig.load(path, env={}) if path.exists() else UploaderConfig()
            cfg.set(key, value)
            cfg.save(path)
            console.print(f"[green]Set {escape(key)} = {escape(value)}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1)

    elif action == "path":
        console.print(str(path), soft_wrap=True)

    else:
        console.print(f"[red]Unknown action: {escape(action)}[/red]")
        console.print("Valid actions: show, set, path")
        raise typer.Exit(1)


# Entry point for the CLI
def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
