"""azblock CLI entry point."""

from pathlib import Path
from typing import Optional

import typer

from ..config import StoreConfig, build_object_store, build_store
from ..errors import BlockstoreError, NotFoundError
from ..identifiers import cid_for, parse_cid
from ..stores import Blockstore
from .common_options import config_option, connection_string_option, container_option
from .display import blocks_table, error, info, info_dict, success, warning

DEFAULT_CONTAINER = "blocks"

app = typer.Typer(
    name="azblock",
    help="Content-addressed block storage on Azure Blob Storage",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def load_config(
    config: Optional[Path],
    container: Optional[str],
    connection_string: Optional[str],
) -> StoreConfig:
    """Merge the config file (if any) with command line overrides."""
    data = {}
    if config:
        data = StoreConfig.from_yaml(config).model_dump()
    if container:
        data["container"] = container
    data.setdefault("container", DEFAULT_CONTAINER)
    if connection_string:
        data["connection_string"] = connection_string
    return StoreConfig.from_dict(data, source=str(config) if config else "<command line>")


def open_store(cfg: StoreConfig, create: bool = False) -> Blockstore:
    """Build and open the block store described by ``cfg``."""
    if cfg.kind != "blockstore":
        raise typer.BadParameter(f"azblock works on block stores, config has kind={cfg.kind!r}")
    if create:
        cfg = cfg.model_copy(update={"create_if_missing": True})
    store = build_store(cfg, build_object_store(cfg))
    store.open()
    return store


@app.command("open")
def open_container(
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
    create: bool = typer.Option(False, "--create", help="Create the container if it is missing"),
):
    """Check the container exists, optionally creating it.

    Example:
        azblock open --container blocks --create
    """
    try:
        cfg = load_config(config, container, connection_string)
        store = open_store(cfg, create=create)
    except BlockstoreError as e:
        error(str(e))
        raise typer.Exit(1)
    success(f"Container ready: {store.container}")
    info_dict(
        {
            "create_if_missing": store.create_if_missing,
            "sharding": store.sharding_strategy,
        }
    )


@app.command()
def put(
    file: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True),
    codec: str = typer.Option("raw", "--codec", help="Multicodec of the content"),
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
):
    """Store a file as a block and print its CID.

    Example:
        azblock put results.parquet
    """
    data = file.read_bytes()
    try:
        cid = cid_for(data, codec=codec)
        store = open_store(load_config(config, container, connection_string))
        store.put(cid, data)
    except (BlockstoreError, KeyError, ValueError) as e:
        error(str(e))
        raise typer.Exit(1)
    typer.echo(str(cid))


@app.command()
def get(
    cid: str = typer.Argument(..., help="CID of the block"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
):
    """Fetch a block by CID."""
    try:
        store = open_store(load_config(config, container, connection_string))
        data = store.get(parse_cid(cid))
    except NotFoundError:
        error(f"Block not found: {cid}")
        raise typer.Exit(1)
    except BlockstoreError as e:
        error(str(e))
        raise typer.Exit(1)

    if output:
        output.write_bytes(data)
        success(f"Wrote {len(data)} bytes to {output}")
    else:
        typer.echo(data, nl=False)


@app.command()
def has(
    cid: str = typer.Argument(..., help="CID of the block"),
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
):
    """Check if a block is stored. Exits with code 1 when it is not."""
    try:
        store = open_store(load_config(config, container, connection_string))
        present = store.has(parse_cid(cid))
    except BlockstoreError as e:
        error(str(e))
        raise typer.Exit(1)

    typer.echo("yes" if present else "no")
    if not present:
        raise typer.Exit(1)


@app.command()
def rm(
    cid: str = typer.Argument(..., help="CID of the block"),
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
):
    """Delete a block. Deleting a missing block is not an error."""
    try:
        store = open_store(load_config(config, container, connection_string))
        store.delete(parse_cid(cid))
    except BlockstoreError as e:
        error(str(e))
        raise typer.Exit(1)
    success(f"Deleted {cid}")


@app.command()
def ls(
    config: Optional[Path] = config_option(),
    container: Optional[str] = container_option(),
    connection_string: Optional[str] = connection_string_option(),
):
    """List stored blocks with their sizes."""
    try:
        store = open_store(load_config(config, container, connection_string))
        rows = [(str(cid), len(data)) for cid, data in store.get_all()]
    except BlockstoreError as e:
        error(str(e))
        raise typer.Exit(1)

    if not rows:
        info(f"No blocks in container {store.container}")
        return
    blocks_table(rows, title=f"{store.container} ({len(rows)} blocks)")


@app.command()
def version():
    """Show azure-blockstore version."""
    from .. import __version__
    info(f"azure-blockstore version: {__version__}")


def main():
    """Main CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        warning("\nInterrupted by user")
        raise typer.Exit(1)


if __name__ == "__main__":
    main()
