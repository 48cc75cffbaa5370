"""CLI entry point for pdfreshape."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from pdfreshape import __version__, logger
from pdfreshape.async_runner import run_async
from pdfreshape.blank_pages import remove_blank_pages
from pdfreshape.compressor import compress
from pdfreshape.dependencies import ensure_backend_dependencies
from pdfreshape.exceptions import InvalidRangeError, PackageError
from pdfreshape.geometry import adjust_dpi, crop, n_up, resize_pages
from pdfreshape.logging import configure_logging
from pdfreshape.settings import BYTES_PER_MB, get_settings
from pdfreshape.splitting import split_by_outline, split_by_size
from pdfreshape.typing.enums import (
    CompressionMode,
    CompressionPreset,
    CropMode,
    LengthUnit,
    NUpDirection,
    PaperSize,
)
from pdfreshape.typing.models import CropMargins, NUpLayout, PageSize

if TYPE_CHECKING:
    from pdfreshape.backends.pymupdf_backend import PyMuPDFBackend
    from pdfreshape.settings import Settings
    from pdfreshape.typing.models import Document

_SPLIT_COMMANDS = frozenset({"split-size", "split-outline"})


def _log_progress(current: int, total: int) -> None:
    logger.debug("Progress", extra={"current": current, "total": total})


def _add_io_arguments(parser: argparse.ArgumentParser, *, split: bool = False) -> None:
    """Register input/output arguments shared by commands.

    Args:
        parser (argparse.ArgumentParser): Subcommand parser.
        split (bool): Whether the command writes several files into a directory.
    """
    parser.add_argument("--input", required=True, type=Path, dest="input_path")
    if split:
        parser.add_argument("--output-dir", type=Path, default=None, dest="output_dir")
    else:
        parser.add_argument("--output", type=Path, default=None, dest="output_path")


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="pdfreshape")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    resize_parser = subparsers.add_parser("resize", help="Resize every page to a paper size")
    _add_io_arguments(resize_parser)
    resize_parser.add_argument("--paper", type=PaperSize.from_str, default=None)
    resize_parser.add_argument("--width", type=float, default=None)
    resize_parser.add_argument("--height", type=float, default=None)
    resize_parser.add_argument("--unit", type=LengthUnit.from_str, default=LengthUnit.MM)
    resize_parser.add_argument("--no-scale-content", action="store_false", dest="scale_content")

    crop_parser = subparsers.add_parser("crop", help="Remove page margins")
    _add_io_arguments(crop_parser)
    for edge in ("top", "right", "bottom", "left"):
        crop_parser.add_argument(f"--{edge}", type=float, default=0.0)
    crop_parser.add_argument("--unit", type=LengthUnit.from_str, default=LengthUnit.MM)
    crop_parser.add_argument("--percentage", action="store_true")

    dpi_parser = subparsers.add_parser("dpi", help="Change the print resolution of pages")
    _add_io_arguments(dpi_parser)
    dpi_parser.add_argument("--target-dpi", required=True, type=float, dest="target_dpi")
    dpi_parser.add_argument("--baseline-dpi", type=float, default=72.0, dest="baseline_dpi")

    nup_parser = subparsers.add_parser("nup", help="Tile several pages per sheet")
    nup_parser.add_argument("--input", required=True, type=Path, nargs="+", dest="input_paths")
    nup_parser.add_argument("--output", type=Path, default=None, dest="output_path")
    nup_parser.add_argument(
        "--pages-per-sheet",
        type=int,
        choices=(2, 4, 6, 8, 9, 16),
        default=4,
        dest="pages_per_sheet",
    )
    nup_parser.add_argument("--direction", type=NUpDirection.from_str, default=NUpDirection.HORIZONTAL)

    compress_parser = subparsers.add_parser("compress", help="Recompress a document")
    _add_io_arguments(compress_parser)
    compress_parser.add_argument("--mode", type=CompressionMode.from_str, default=None)
    compress_parser.add_argument("--preset", type=CompressionPreset.from_str, default=None)

    split_size_parser = subparsers.add_parser("split-size", help="Split into parts under a size budget")
    _add_io_arguments(split_size_parser, split=True)
    split_size_parser.add_argument("--target-mb", type=float, default=None, dest="target_mb")

    split_outline_parser = subparsers.add_parser("split-outline", help="Split at bookmarks")
    _add_io_arguments(split_outline_parser, split=True)
    split_outline_parser.add_argument("--level", type=int, default=1)

    blank_parser = subparsers.add_parser("remove-blank", help="Drop blank pages")
    _add_io_arguments(blank_parser)
    blank_parser.add_argument("--threshold", type=float, default=None)

    return parser


def _page_size_from_args(args: argparse.Namespace) -> PageSize:
    """Build the resize target from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Raises:
        InvalidRangeError: If neither a paper preset nor both dimensions are given.

    Returns:
        PageSize: Target size.
    """
    if args.paper is not None:
        return PageSize.from_preset(args.paper)
    if args.width is None or args.height is None:
        raise InvalidRangeError(message="resize needs --paper or both --width and --height")
    return PageSize.from_dimensions(args.width, args.height, args.unit)


def _margins_from_args(args: argparse.Namespace) -> CropMargins:
    """Build crop margins from CLI arguments.

    Args:
        args (argparse.Namespace): Parsed CLI args.

    Returns:
        CropMargins: Margins to remove.
    """
    return CropMargins(
        top=args.top,
        right=args.right,
        bottom=args.bottom,
        left=args.left,
        unit=args.unit,
        mode=CropMode.PERCENTAGE if args.percentage else CropMode.ABSOLUTE,
    )


def _default_output(input_path: Path, suffix: str, settings: Settings) -> Path:
    return Path(settings.results_dir) / f"{input_path.stem}_{suffix}.pdf"


async def _write(document: Document, path: Path, backend: PyMuPDFBackend, settings: Settings) -> Path:
    """Serialize one document to disk.

    Args:
        document (Document): Document to write.
        path (Path): Target file.
        backend (PyMuPDFBackend): Writer.
        settings (Settings): Runtime settings.

    Returns:
        Path: Written file.
    """
    data = await backend.serialize(document, optimize_objects=settings.optimize_objects)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


async def _run_single_output(args: argparse.Namespace, settings: Settings, backend: PyMuPDFBackend) -> list[Path]:
    """Run a command that turns one input file into one output file.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.
        backend (PyMuPDFBackend): Document backend.

    Returns:
        list[Path]: Written file.
    """
    raw = args.input_path.read_bytes()
    document = await backend.load(raw)
    output_path = args.output_path or _default_output(args.input_path, args.command.replace("-", "_"), settings)

    try:
        if args.command == "compress":
            result = await compress(
                document,
                writer=backend,
                renderer=backend,
                encoder=backend,
                mode=args.mode or settings.compression_mode,
                preset=args.preset or settings.compression_preset,
                input_bytes=len(raw),
                on_progress=lambda percent: _log_progress(percent, 100),
            )
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(result.data)
            logger.info("Compression saved space", extra={"saved_percent": result.saved_percent})
            return [output_path]

        if args.command == "resize":
            transformed = resize_pages(
                document,
                _page_size_from_args(args),
                scale_content=args.scale_content,
                on_progress=_log_progress,
            )
        elif args.command == "crop":
            transformed = await crop(
                document,
                _margins_from_args(args),
                renderer=backend,
                encoder=backend,
                on_progress=_log_progress,
            )
        elif args.command == "dpi":
            transformed = adjust_dpi(
                document,
                args.target_dpi,
                baseline_dpi=args.baseline_dpi,
                on_progress=_log_progress,
            )
        else:
            threshold = args.threshold if args.threshold is not None else settings.blank_variance_threshold
            transformed = await remove_blank_pages(
                document,
                renderer=backend,
                variance_threshold=threshold,
                on_progress=_log_progress,
            )
        return [await _write(transformed, output_path, backend, settings)]
    finally:
        backend.release(document)


async def _run_nup(args: argparse.Namespace, settings: Settings, backend: PyMuPDFBackend) -> list[Path]:
    """Run the `nup` command over one or more input files.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.
        backend (PyMuPDFBackend): Document backend.

    Returns:
        list[Path]: Written file.
    """
    documents = [await backend.load(path.read_bytes()) for path in args.input_paths]
    layout = NUpLayout(pages_per_sheet=args.pages_per_sheet, direction=args.direction)
    output_path = args.output_path or _default_output(args.input_paths[0], "nup", settings)
    try:
        sheets = n_up(documents, layout, on_progress=_log_progress)
        return [await _write(sheets, output_path, backend, settings)]
    finally:
        for document in documents:
            backend.release(document)


async def _run_split(args: argparse.Namespace, settings: Settings, backend: PyMuPDFBackend) -> list[Path]:
    """Run a split command and write every part.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.
        backend (PyMuPDFBackend): Document backend.

    Returns:
        list[Path]: Written parts, in order.
    """
    document = await backend.load(args.input_path.read_bytes())
    output_dir = args.output_dir or Path(settings.results_dir)
    try:
        if args.command == "split-size":
            target_bytes = (
                int(args.target_mb * BYTES_PER_MB) if args.target_mb is not None else settings.split_target_bytes
            )
            parts = await split_by_size(
                document,
                target_bytes,
                writer=backend,
                optimize_objects=settings.optimize_objects,
                on_progress=_log_progress,
            )
        else:
            outline = await backend.get_outline(document)
            parts = split_by_outline(document, outline, args.level, on_progress=_log_progress)

        written: list[Path] = []
        for number, part in enumerate(parts, start=1):
            path = output_dir / f"{args.input_path.stem}_part_{number}.pdf"
            written.append(await _write(part, path, backend, settings))
        return written
    finally:
        backend.release(document)


async def _run_command(args: argparse.Namespace, settings: Settings) -> list[Path]:
    """Dispatch a parsed command.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.

    Returns:
        list[Path]: Written files.
    """
    from pdfreshape.backends.pymupdf_backend import PyMuPDFBackend  # noqa: PLC0415

    backend = PyMuPDFBackend()
    if args.command == "nup":
        return await _run_nup(args, settings, backend)
    if args.command in _SPLIT_COMMANDS:
        return await _run_split(args, settings, backend)
    return await _run_single_output(args, settings, backend)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        ensure_backend_dependencies(args.command)
        written = run_async(_run_command(args, settings))
    except PackageError:
        logger.exception("Operation failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Operation aborted by user", extra={"command": args.command})
        return 130
    except Exception:
        logger.exception("Unexpected error", extra={"command": args.command})
        return 1

    logger.info("Operation completed", extra={"command": args.command, "outputs": [str(p) for p in written]})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
