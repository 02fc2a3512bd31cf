import argparse
import logging
import re
from pathlib import Path
from typing import Optional, Sequence

from embed_header import __version__
from embed_header.errors import (
    EmbedError,
    InputReadError,
    InvalidArgumentsError,
    ModelCheckError,
    OutputWriteError,
)
from embed_header.render import ArrayStyle, Mode, RenderOptions, render


logger = logging.getLogger(__name__)

LOG_FORMAT = "[embed-header] %(levelname)s: %(message)s"

DEFAULT_ARRAY_LINE_WIDTH = 12
DEFAULT_STRING_LINE_WIDTH = 64


def default_symbol_name(input_path: Path) -> str:
    name, _ = re.subn(r"[^A-Za-z0-9]", "_", input_path.name)
    if name[:1].isdigit():
        name = "_" + name
    return name


def default_output_path(input_path: Path, cwd: Optional[Path] = None) -> Path:
    cwd = cwd if cwd is not None else Path.cwd()
    return cwd / Path(input_path.name).with_suffix(".hpp")


def default_line_width(style: ArrayStyle) -> int:
    return DEFAULT_STRING_LINE_WIDTH if style.is_string else DEFAULT_ARRAY_LINE_WIDTH


def read_input(input_path: Path) -> bytes:
    if not input_path.exists():
        raise InputReadError(f'file path "{input_path}" does not exist')
    if not input_path.is_file():
        raise InputReadError(f'file path "{input_path}" is not a file')
    try:
        return input_path.read_bytes()
    except OSError as exc:
        raise InputReadError(f"failed to read input file {input_path}: {exc}") from exc


def write_output(output_path: Path, text: str, force: bool = False) -> None:
    # "x" fails atomically if the file appeared in the meantime
    mode = "w" if force else "x"
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        f = output_path.open(mode, encoding="utf-8")
    except FileExistsError as exc:
        raise OutputWriteError(f'output file "{output_path}" already exists (use --force to overwrite)') from exc
    except OSError as exc:
        raise OutputWriteError(f"failed to write output file {output_path}: {exc}") from exc

    try:
        with f:
            f.write(text)
    except OSError as exc:
        output_path.unlink(missing_ok=True)
        raise OutputWriteError(f"failed to write output file {output_path}: {exc}") from exc


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="embed-header",
        description="Embed a file into a C++ header as a compile-time constant.",
    )
    ap.add_argument("-i", "--input-path", type=Path, required=True, help="Input file path")
    ap.add_argument(
        "-o",
        "--output-path",
        type=Path,
        help="Output header path (default: <input name>.hpp in the current directory)",
    )
    ap.add_argument("-s", "--symbol-name", help="Name of the C++ symbol (default: derived from the input filename)")
    ap.add_argument("-n", "--namespace", help="Namespace in which to put the symbol")
    ap.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.TEXT.value,
        help="Input mode; text requires UTF-8 input (default: text)",
    )
    ap.add_argument(
        "-b",
        "--binary",
        dest="mode",
        action="store_const",
        const=Mode.BINARY.value,
        help="Shortcut for --mode binary",
    )
    ap.add_argument(
        "--style",
        choices=[s.value for s in ArrayStyle],
        help="Output syntax (default: array in binary mode, c-string in text mode)",
    )
    ap.add_argument(
        "-w",
        "--line-width",
        type=int,
        help=f"Elements per generated line (default: {DEFAULT_ARRAY_LINE_WIDTH} for arrays, "
        f"{DEFAULT_STRING_LINE_WIDTH} for strings)",
    )
    ap.add_argument("-f", "--force", action="store_true", help="Overwrite the output file if it exists")
    ap.add_argument(
        "--check-onnx",
        action="store_true",
        help="Validate the input with onnx.checker before embedding it",
    )
    verbosity = ap.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug details")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def options_from_args(args: argparse.Namespace) -> RenderOptions:
    mode = Mode(args.mode)
    if args.style is not None:
        style = ArrayStyle(args.style)
    else:
        style = ArrayStyle.ARRAY if mode is Mode.BINARY else ArrayStyle.C_STRING

    line_width = args.line_width if args.line_width is not None else default_line_width(style)
    symbol_name = args.symbol_name if args.symbol_name is not None else default_symbol_name(args.input_path)

    return RenderOptions(
        symbol_name=symbol_name,
        mode=mode,
        line_width=line_width,
        array_style=style,
        namespace=args.namespace,
    )


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format=LOG_FORMAT)


def run(args: argparse.Namespace) -> None:
    input_path: Path = args.input_path
    if not input_path.name:
        raise InvalidArgumentsError(f'input file path "{input_path}" does not contain a valid filename')

    opts = options_from_args(args)
    logger.debug("Options: %r", opts)
    output_path: Path = args.output_path or default_output_path(input_path)

    data = read_input(input_path)
    logger.debug("Read %d bytes from %s", len(data), input_path)

    if args.check_onnx:
        try:
            from embed_header.onnx_check import check_model
        except ImportError as exc:
            raise ModelCheckError(
                f"--check-onnx needs the onnx package ({exc}); install it with: pip install 'embed-header[onnx]'"
            ) from exc

        summary = check_model(data, str(input_path))
        logger.info("ONNX model OK: %s", summary.describe())

    rendered = render(data, opts)
    write_output(output_path, rendered.text(), force=args.force)
    logger.info("Embedded %d bytes from %s as %s into %s", len(data), input_path, opts.symbol_name, output_path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args)

    try:
        run(args)
    except EmbedError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
