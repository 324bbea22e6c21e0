#!/usr/bin/env python3
"""
Command-line entry point for ExifAI Lens.

    exif-lens serve [--demo]            start the web gallery
    exif-lens analyze IMAGE_OR_URL...   analyze images headless and print a table
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .api import CLIENTS, get_client
from .config import IMAGE_SIZES, Settings
from .constants import DEMO_ITEMS
from .core.controller import GalleryController
from .core.errors import ConfigError
from .core.models import ItemStatus, UploadedFile, guess_content_type
from .core.runner import LoopRunner
from .utils.log_utils import LOG_LEVELS, configure_from_name, get_logger

logger = get_logger(__name__)

STATUS_STYLES = {
    ItemStatus.COMPLETE: "green",
    ItemStatus.ERROR: "red",
    ItemStatus.ANALYZING: "yellow",
    ItemStatus.PENDING: "dim",
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Infer camera metadata for images with a vision model.")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--api',
                        choices=sorted(CLIENTS),
                        help='Inference provider to use (default: gemini)')
    common.add_argument('--model',
                        help="Model name passed to the provider (default: the provider's default)")
    common.add_argument('--size',
                        type=int,
                        choices=IMAGE_SIZES,
                        help='Downscale images to about SIZExSIZE pixels before upload (default: send originals)')
    common.add_argument('--log-level',
                        choices=LOG_LEVELS,
                        help='Set logging level (default: info)')

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", parents=[common], help="Start the web gallery")
    serve.add_argument('--host', help='Host to bind to (default: 127.0.0.1)')
    serve.add_argument('--port', type=int, help='Port to bind to (default: 3000)')
    serve.add_argument('--demo', action='store_true', default=None,
                       help='Start with a few demo images in the gallery')

    analyze = sub.add_parser("analyze", parents=[common], help="Analyze images and print the results")
    analyze.add_argument('sources', nargs='+', help='Image files or http(s) URLs')
    analyze.add_argument('--export', metavar='FILE',
                         help='Write the JSON export to FILE (a directory uses the default file name)')
    return parser.parse_args(argv)


def load_upload(path: Path) -> UploadedFile:
    return UploadedFile(
        filename=path.name,
        content_type=guess_content_type(path.name),
        data=path.read_bytes(),
    )


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def build_controller(settings: Settings, items=()) -> GalleryController:
    client = get_client(settings.provider, **settings.client_kwargs())
    logger.info("Using %s (%s)", settings.provider, client.model_name)
    return GalleryController(
        client,
        items=items,
        max_image_size=settings.max_image_size,
        fetch_timeout=settings.fetch_timeout,
    )


async def analyze_sources(controller: GalleryController, sources: List[str]) -> None:
    files = []
    for source in sources:
        if is_url(source):
            controller.submit_url(source)
        else:
            files.append(load_upload(Path(source)))
    if files:
        controller.submit_files(files)
    await controller.wait_idle()


def results_table(controller: GalleryController) -> Table:
    table = Table(title="Analysis results")
    for column in ("ID", "Source", "Status", "Camera", "Lens", "Aperture", "Shutter", "ISO", "Focal", "Notes"):
        table.add_column(column, overflow="fold")
    for item in reversed(controller.filter_by_status("all")):
        meta = item.metadata
        status = f"[{STATUS_STYLES[item.status]}]{item.status.value}[/]"
        if meta:
            table.add_row(item.id, item.filename or item.url, status, meta.camera, meta.lens,
                          meta.aperture, meta.shutter_speed, meta.iso, meta.focal_length, meta.description)
        else:
            table.add_row(item.id, item.filename or item.url, status, "", "", "", "", "", "", item.error or "")
    return table


def write_export(controller: GalleryController, target: str) -> Path:
    controller.select_all("all")
    document = controller.bulk_export()
    path = Path(target)
    if path.is_dir():
        path = path / document.filename
    path.write_text(document.content, encoding="utf-8")
    return path


def cli_analyze(settings: Settings, args: argparse.Namespace) -> int:
    missing = [s for s in args.sources if not is_url(s) and not Path(s).is_file()]
    if missing:
        print(f"Error: File(s) not found: {', '.join(missing)}", file=sys.stderr)
        return 1
    controller = build_controller(settings)
    asyncio.run(analyze_sources(controller, args.sources))

    console = Console()
    console.print(results_table(controller))
    if args.export:
        path = write_export(controller, args.export)
        console.print(f"Exported {controller.count_by_status('all')} item(s) to {path}")
    return 0 if controller.count_by_status("error") == 0 else 2


def cli_serve(settings: Settings) -> int:
    from .web import create_app

    controller = build_controller(settings, items=DEMO_ITEMS if settings.demo else ())
    with LoopRunner() as runner:
        app = create_app(controller, runner)
        logger.info("Starting ExifAI Lens on http://%s:%d", settings.host, settings.port)
        app.run(host=settings.host, port=settings.port, threaded=True)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.from_env().override(
            provider=args.api,
            model=args.model,
            max_image_size=args.size,
            log_level=args.log_level,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
            demo=getattr(args, "demo", None),
        )
        configure_from_name(settings.log_level)
        if args.command == "serve":
            return cli_serve(settings)
        return cli_analyze(settings, args)
    except ConfigError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
