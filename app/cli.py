from __future__ import annotations

from pathlib import Path
from typing import Optional

import orjson
import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console

from adapters.filesystem.json_io import read_json, write_bytes_atomic, write_json_atomic
from app.config import AppSettings, configure_logging, load_settings
from app.wiring import build_preview_renderer, build_session
from domain.errors import PreviewRenderError
from domain.models import ImportedLayout
from domain.placeholders import unknown_variables
from domain.services.convert_legacy import LayoutToLegacyConverter
from domain.services.convert_v2 import LayoutToV2Converter
from domain.services.layout_import import detect_layout_version, parse_layout

app = typer.Typer(no_args_is_help=True)
convert_app = typer.Typer(no_args_is_help=True)
app.add_typer(convert_app, name="convert")
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = load_settings(config)
    configure_logging(settings)
    ctx.obj = settings


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj if isinstance(ctx.obj, AppSettings) else load_settings()


def _read_layout(input_path: Path) -> ImportedLayout:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        return parse_layout(read_json(input_path))
    except (orjson.JSONDecodeError, ValidationError, ValueError) as exc:
        console.print(f"[red]Cannot import layout:[/] {exc}")
        raise typer.Exit(code=1) from exc


@convert_app.command("to-v2")
def convert_to_v2(
    ctx: typer.Context,
    input_path: Path = typer.Argument(..., help="Legacy or V2 layout JSON."),
    output_path: Path = typer.Argument(..., help="Where to write the V2 layout."),
) -> None:
    editor = _settings(ctx).editor
    layout = _read_layout(input_path)
    converter = LayoutToV2Converter(editor.default_font_size, editor.default_color)
    document = converter.convert(layout.text_fields, layout.image_fields, layout.payment_plans)
    if len(layout.payment_plans) > 1:
        console.print(
            f"[yellow]V2 holds one payment plan; dropped {len(layout.payment_plans) - 1}[/]"
        )
    write_json_atomic(output_path, document.to_dict())
    console.print(f"[green]Wrote[/] {output_path}")


@convert_app.command("to-legacy")
def convert_to_legacy(
    input_path: Path = typer.Argument(..., help="Legacy or V2 layout JSON."),
    output_path: Path = typer.Argument(..., help="Where to write the legacy layout."),
) -> None:
    layout = _read_layout(input_path)
    document = LayoutToLegacyConverter().convert(
        layout.text_fields, layout.image_fields, layout.payment_plans
    )
    write_json_atomic(output_path, document.to_dict())
    console.print(f"[green]Wrote[/] {output_path}")


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Layout JSON file to validate.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        payload = read_json(input_path)
    except orjson.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/] {exc}")
        raise typer.Exit(code=1) from exc

    version = detect_layout_version(payload)
    if version == "unknown":
        console.print(f"[red]Unrecognized layout format:[/] {input_path}")
        raise typer.Exit(code=1)
    layout = _read_layout(input_path)
    console.print(
        f"[green]Valid {version} layout:[/] {input_path} "
        f"({len(layout.text_fields)} texts, {len(layout.image_fields)} images, "
        f"{len(layout.payment_plans)} payment plans)"
    )
    unknown = sorted(
        {token for field in layout.text_fields for token in unknown_variables(field.content)}
    )
    if unknown:
        console.print(f"[yellow]Unknown variables:[/] {', '.join(unknown)}")


@app.command("render")
def render(
    ctx: typer.Context,
    template_pdf: Path = typer.Argument(..., help="Source PDF template."),
    layout_json: Path = typer.Argument(..., help="Legacy or V2 layout JSON."),
    output_pdf: Path = typer.Argument(..., help="Where to write the preview PDF."),
) -> None:
    for path in (template_pdf, layout_json):
        if not path.exists():
            console.print(f"[red]File not found:[/] {path}")
            raise typer.Exit(code=1)

    settings = _settings(ctx)
    session = build_session(settings)
    renderer = build_preview_renderer(settings)
    source_pdf = template_pdf.read_bytes()
    try:
        session.init_from_page_count(renderer.page_count(source_pdf))
    except PreviewRenderError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc

    if session.import_layout(layout_json.read_bytes()) is None:
        console.print(f"[red]Cannot import layout:[/] {layout_json}")
        raise typer.Exit(code=1)

    result = session.export_pdf(renderer, source_pdf)
    if not result.ok:
        console.print(f"[red]Render failed:[/] {result.message}")
        raise typer.Exit(code=1)
    write_bytes_atomic(output_pdf, result.payload)
    console.print(f"[green]Wrote[/] {output_pdf}")


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
) -> None:
    from app.web_main import create_app

    settings = _settings(ctx)
    console.print(f"[green]Serving[/] {settings.editor.title} on http://{host}:{port}")
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=settings.editor.log_level.lower(),
    )


if __name__ == "__main__":
    app()
