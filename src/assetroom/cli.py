from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any, Iterator

import typer
from rich.columns import Columns
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from assetroom.bookmarks import RootBookmark
from assetroom.config import AppConfig, default_config_path, load_config, write_default_config
from assetroom.errors import AssetRoomError, CatalogClosed
from assetroom.filetypes import FileTypeFilter, ext_label
from assetroom.ids import normalize_asset_id
from assetroom.media import probe_image
from assetroom.models import AssetRecord
from assetroom.output_models import asset_output, sweep_output
from assetroom.service import CatalogService
from assetroom.util.logging import setup_logging, use_color

app = typer.Typer(help="assetroom: catalog files and covers under a root folder")


@dataclass(slots=True)
class AppState:
    service: CatalogService
    console: Console
    config: AppConfig
    config_path: Path
    bookmark: RootBookmark
    root_override: Path | None = None


def _print_logo(console: Console, show_logo: bool) -> None:
    if not show_logo:
        return
    console.print("[bold cyan]▞ assetroom[/bold cyan] [dim]assets • covers • tags[/dim]")


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


@contextmanager
def _reporting(st: AppState) -> Iterator[None]:
    try:
        yield
    except AssetRoomError as exc:
        st.console.print(f"[red]error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _resolve_root(st: AppState) -> Path:
    root = st.root_override or st.bookmark.load() or st.config.default_root
    if root is None:
        raise CatalogClosed("no catalog root selected; run `assetroom open ROOT` first")
    return root


def _open(st: AppState) -> CatalogService:
    if not st.service.is_open:
        st.service.open_catalog(_resolve_root(st))
    return st.service


def _emit_obj(console: Console, obj: dict, json_out: bool) -> None:
    if json_out:
        typer.echo(json.dumps(obj, indent=2))
        return
    for k, v in obj.items():
        console.print(f"[bold]{k}[/bold]: {v}")


def _emit_assets(st: AppState, rows: list[AssetRecord], json_out: bool) -> None:
    if json_out:
        typer.echo(json.dumps([asset_output(r).model_dump() for r in rows], indent=2))
        return
    if not rows:
        st.console.print("[dim]no assets[/dim]")
        return

    if st.config.ui.view_mode == "grid":
        cards = [
            Panel(
                f"[bold]{r.name}[/bold]\n[dim]{r.tags}[/dim]\n[magenta]{r.id[:8]}[/magenta]",
                title=ext_label(r.asset_rel_path),
                width=28,
            )
            for r in rows
        ]
        st.console.print(Columns(cards))
    else:
        table = Table(title=f"{len(rows)} items")
        table.add_column("id")
        table.add_column("name")
        table.add_column("tags")
        table.add_column("type")
        table.add_column("asset")
        for r in rows:
            table.add_row(r.id, r.name, r.tags, ext_label(r.asset_rel_path), r.asset_rel_path)
        st.console.print(table)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    root: Annotated[Path | None, typer.Option("--root", help="Catalog root for this invocation")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
) -> None:
    setup_logging(verbose)
    cfg_path = config.expanduser() if config else default_config_path()
    if not cfg_path.exists():
        write_default_config(cfg_path)
    cfg = load_config(cfg_path)
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None)
    _print_logo(console, show_logo=cfg.ui.show_logo)
    svc = CatalogService(cfg)
    ctx.call_on_close(svc.close)
    ctx.obj = AppState(
        service=svc,
        console=console,
        config=cfg,
        config_path=cfg_path,
        bookmark=RootBookmark(),
        root_override=root.expanduser() if root else None,
    )


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else None)
    _emit_obj(st.console, {"config_path": str(written)}, json_out)


@app.command("open")
def open_cmd(
    ctx: typer.Context,
    root: Annotated[Path, typer.Argument(help="Root folder of the catalog")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        info = st.service.open_catalog(root)
    st.bookmark.save(Path(info["root"]))
    _emit_obj(st.console, info, json_out)


@app.command("forget")
def forget_cmd(ctx: typer.Context) -> None:
    st = _state(ctx)
    st.bookmark.clear()
    typer.echo("forgot remembered root")


@app.command("ls")
def ls_cmd(
    ctx: typer.Context,
    query: Annotated[str | None, typer.Option("--query", "-q", help="Substring of name or tags")] = None,
    kind: Annotated[FileTypeFilter, typer.Option("--type", help="File type filter")] = FileTypeFilter.ALL,
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Show at most this many")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        rows = _open(st).list_assets(query=query, file_type=kind)
    cap = limit if limit is not None else st.config.ui.page_size
    if cap and cap > 0:
        rows = rows[:cap]
    _emit_assets(st, rows, json_out)


@app.command("show")
def show_cmd(
    ctx: typer.Context,
    asset_id: Annotated[str, typer.Argument(help="Asset id")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        record = _open(st).get_asset(normalize_asset_id(asset_id))
    out = asset_output(record, probe_image(record.cover_path)).model_dump()
    if json_out:
        typer.echo(json.dumps(out, indent=2))
        return
    cover = out.pop("cover")
    out.pop("tags_raw")
    out["tags"] = ", ".join(out["tags"])
    out["cover"] = cover["path"]
    if cover.get("width"):
        out["cover_size"] = f"{cover['width']}x{cover['height']} {cover.get('format') or ''}".strip()
    _emit_obj(st.console, out, json_out=False)


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="File to import")],
    cover: Annotated[Path, typer.Option("--cover", help="Cover image")],
    name: Annotated[str, typer.Option("--name", help="Display name")],
    tags: Annotated[str, typer.Option("--tags", help="Comma separated tags")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        record = _open(st).add_asset(file, cover, name, tags)
    if json_out:
        typer.echo(json.dumps(asset_output(record).model_dump(), indent=2))
        return
    st.console.print(f"[green]added[/green] {record.id} {record.name}")


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    asset_id: Annotated[str, typer.Argument(help="Asset id")],
    name: Annotated[str | None, typer.Option("--name", help="New display name")] = None,
    tags: Annotated[str | None, typer.Option("--tags", help="New tags")] = None,
    cover: Annotated[Path | None, typer.Option("--cover", help="Replacement cover image")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        svc = _open(st)
        aid = normalize_asset_id(asset_id)
        current = svc.get_asset(aid)
        record = svc.update_asset(
            aid,
            name if name is not None else current.name,
            tags if tags is not None else current.tags,
            new_cover_path=cover,
        )
    if json_out:
        typer.echo(json.dumps(asset_output(record).model_dump(), indent=2))
        return
    st.console.print(f"[green]updated[/green] {record.id} {record.name}")


@app.command("rm")
def rm_cmd(
    ctx: typer.Context,
    asset_id: Annotated[str, typer.Argument(help="Asset id")],
) -> None:
    st = _state(ctx)
    with _reporting(st):
        _open(st).delete_asset(normalize_asset_id(asset_id))
    typer.echo(f"removed {asset_id}")


@app.command("sweep")
def sweep_cmd(
    ctx: typer.Context,
    apply: Annotated[bool, typer.Option("--apply", help="Delete orphan files")] = False,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        report = _open(st).sweep_orphans(apply=apply)
    payload: dict[str, Any] = sweep_output(report).model_dump()
    if json_out:
        typer.echo(json.dumps(payload, indent=2))
        return
    table = Table(title="sweep" if not apply else "sweep (applied)")
    table.add_column("kind")
    table.add_column("path")
    for rel in report.orphan_files:
        table.add_row("removed" if rel in report.removed else "orphan", rel)
    for rel in report.missing_files:
        table.add_row("missing", rel)
    st.console.print(table)


@app.command("status")
def status_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    with _reporting(st):
        info = _open(st).status()
    info["config_path"] = str(st.config_path)
    _emit_obj(st.console, info, json_out)


if __name__ == "__main__":
    app()
