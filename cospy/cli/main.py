"""COS CLI - Main commands."""
import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="cos",
    help="COS object storage CLI",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def make_client(sign: Optional[str], bucket: Optional[str]):
    """Build a client from the environment and a pre-issued signature."""
    from cospy import CosClient, APIConfig, StaticSigner

    if not sign:
        console.print("[red]No signature. Pass --sign or set COS_SIGN.[/red]")
        raise typer.Exit(1)

    config = APIConfig.from_env(**({'bucket': bucket} if bucket else {}))
    if not config.app_id:
        console.print("[red]COS_APP_ID is not set.[/red]")
        raise typer.Exit(1)
    return CosClient(config, StaticSigner(sign))


SignOption = typer.Option(None, "--sign", "-s", envvar="COS_SIGN", help="Pre-issued signature")
BucketOption = typer.Option(None, "--bucket", "-b", help="Bucket (defaults to COS_BUCKET)")


@app.command()
def upload(
    src: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    dst: str = typer.Argument(..., help="Remote file path"),
    slice_size: Optional[int] = typer.Option(None, "--slice-size", help="Slice size in bytes"),
    session: Optional[str] = typer.Option(None, "--session", help="Resume a previous session"),
    biz_attr: Optional[str] = typer.Option(None, "--biz-attr", help="Caller metadata"),
    sign: Optional[str] = SignOption,
    bucket: Optional[str] = BucketOption,
):
    """Upload a file in slices."""
    from cospy import CosException, UploadOptions

    async def do_upload():
        async with make_client(sign, bucket) as cos:
            options = UploadOptions(
                bucket=bucket,
                biz_attr=biz_attr,
                session=session,
                slice_size=slice_size,
            )

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {src.name}", total=100)

                def on_progress(fraction: float):
                    progress.update(task, completed=fraction * 100)

                try:
                    result = await cos.upload_slice(dst, src, options, on_progress)
                except CosException as e:
                    console.print(f"[red]Upload rejected: {e}[/red]")
                    raise typer.Exit(1)

            if not result.ok:
                console.print(f"[red]Upload {result.status.value}: {result.error}[/red]")
                if result.session_id:
                    console.print(f"Resume with: --session {result.session_id}")
                raise typer.Exit(1)

            console.print(f"[green]Uploaded:[/green] {dst}")
            if result.access_url:
                console.print(f"URL: {result.access_url}")
            console.print(f"Size: {result.file_size:,} bytes")

    run_async(do_upload())


@app.command()
def stat(
    path: str = typer.Argument(..., help="Remote file or folder path"),
    sign: Optional[str] = SignOption,
    bucket: Optional[str] = BucketOption,
):
    """Show file or folder info."""
    async def show_info():
        async with make_client(sign, bucket) as cos:
            response = await cos.stat(path, bucket=bucket)
            console.print_json(json.dumps(response.get('data') or {}))

    run_async(show_info())


@app.command()
def mkdir(
    path: str = typer.Argument(..., help="Remote folder path, ending with '/'"),
    biz_attr: Optional[str] = typer.Option(None, "--biz-attr", help="Caller metadata"),
    sign: Optional[str] = SignOption,
    bucket: Optional[str] = BucketOption,
):
    """Create a folder."""
    async def do_mkdir():
        async with make_client(sign, bucket) as cos:
            await cos.create_folder(path, biz_attr=biz_attr, bucket=bucket)
            console.print(f"[green]Created folder:[/green] {path}")

    run_async(do_mkdir())


@app.command()
def ls(
    path: str = typer.Argument("/", help="Remote folder path"),
    sign: Optional[str] = SignOption,
    bucket: Optional[str] = BucketOption,
):
    """List a folder."""
    async def list_files():
        async with make_client(sign, bucket) as cos:
            objects = await cos.list_all(path, bucket=bucket)

            table = Table(title=path)
            table.add_column("Name")
            table.add_column("Size", justify="right")
            table.add_column("biz_attr")
            for obj in objects:
                if obj.is_folder:
                    table.add_row(f"[blue]{obj.name}/[/blue]", "-", obj.biz_attr)
                else:
                    table.add_row(obj.name, f"{obj.size:,}", obj.biz_attr)
            console.print(table)

    run_async(list_files())


@app.command()
def rm(
    path: str = typer.Argument(..., help="Remote file or folder path"),
    recursive: bool = typer.Option(False, "-r", "--recursive", help="Delete folder content"),
    sign: Optional[str] = SignOption,
    bucket: Optional[str] = BucketOption,
):
    """Delete a file or folder."""
    async def do_delete():
        async with make_client(sign, bucket) as cos:
            if path.endswith('/'):
                await cos.delete_folder(path, recursive=recursive, bucket=bucket)
            else:
                await cos.delete_file(path, bucket=bucket)
            console.print(f"[green]Deleted:[/green] {path}")

    run_async(do_delete())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
