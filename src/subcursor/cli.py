"""CLI implementation for subcursor."""

import json
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .core.guard import DEFAULT_GUARD_MODE
from .core.handle import SharedStreamHandle
from .core.cursor import SubCursor, windows_from_entries
from .core.model import SubCursorError
from .io import open_stream
from .io.base import RangeNotSupportedError

app = typer.Typer(add_completion=False, help="Expose byte windows of files and URLs.")

# errors reported per source instead of as a traceback
_SOURCE_ERRORS = (SubCursorError, RangeNotSupportedError, OSError, ValueError)


def parse_entry(spec: str) -> tuple[int, Optional[int], str]:
    """Parse ``NAME:START[:END]`` into a ``(start, end, name)`` entry."""
    parts = spec.split(":")
    if len(parts) not in (2, 3) or not parts[0]:
        raise typer.BadParameter(f"Expected NAME:START[:END], got {spec!r}")
    if Path(parts[0]).name != parts[0]:
        raise typer.BadParameter(f"Entry name must be a plain file name: {parts[0]!r}")
    try:
        start = int(parts[1])
        end = int(parts[2]) if len(parts) == 3 and parts[2] else None
    except ValueError:
        raise typer.BadParameter(f"Offsets must be integers in {spec!r}") from None
    return start, end, parts[0]


def describe(source: str, start: int, end: Optional[int], mode: str) -> Dict[str, Any]:
    """Return a JSON-serialisable description of one window."""
    try:
        with open_stream(source) as stream:
            window = SubCursor(SharedStreamHandle(stream, mode=mode), start, end, preserve=False)
            return {"success": True, "source": source, "start": start, "end": end, "length": window.length()}
    except _SOURCE_ERRORS as e:
        return {"success": False, "source": source, "error": str(e)}


@app.command()
def cat(
    source: str = typer.Argument(..., help="File or URL to cut the window from"),
    start: int = typer.Option(0, "--start", min=0, help="Absolute offset where the window begins"),
    end: Optional[int] = typer.Option(None, "--end", min=0, help="Absolute offset where the window ends (default: end of source)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    mode: str = typer.Option(DEFAULT_GUARD_MODE, "--mode", help="Exclusive access guard: cooperative or threadsafe"),
):
    """Copy the bytes of one window to stdout or a file."""
    sink = open(output, "wb") if output else typer.get_binary_stream("stdout")
    try:
        with open_stream(source) as stream:
            window = SubCursor(SharedStreamHandle(stream, mode=mode), start, end, preserve=False)
            shutil.copyfileobj(window, sink)
        sink.flush()
    except _SOURCE_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        if output:
            sink.close()


@app.command()
def info(
    sources: list[str] = typer.Argument(..., help="Files or URLs to describe"),
    start: int = typer.Option(0, "--start", min=0, help="Absolute offset where the window begins"),
    end: Optional[int] = typer.Option(None, "--end", min=0, help="Absolute offset where the window ends"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    mode: str = typer.Option(DEFAULT_GUARD_MODE, "--mode", help="Exclusive access guard: cooperative or threadsafe"),
):
    """Describe the window [start, end) of one or many sources as JSON."""
    results = [describe(src, start, end, mode) for src in sources]

    if len(results) == 1 and not jsonl:
        json.dump(results[0], sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        for obj in results:
            sys.stdout.write(json.dumps(obj))
            sys.stdout.write("\n")

    if any(not r["success"] for r in results):
        raise typer.Exit(code=1)


@app.command()
def split(
    source: str = typer.Argument(..., help="File or URL holding the entries"),
    entries: list[str] = typer.Option(..., "--entry", "-e", help="NAME:START[:END], repeatable"),
    outdir: Path = typer.Option(Path("."), "--outdir", "-d", help="Directory to write the entries to"),
    mode: str = typer.Option(DEFAULT_GUARD_MODE, "--mode", help="Exclusive access guard: cooperative or threadsafe"),
):
    """Write each named window of SOURCE to its own file in OUTDIR."""
    parsed = [parse_entry(spec) for spec in entries]
    outdir.mkdir(parents=True, exist_ok=True)
    try:
        with open_stream(source) as stream:
            handle = SharedStreamHandle(stream, mode=mode)
            for name, window in windows_from_entries(handle, parsed, preserve=False).items():
                target = outdir / name
                with open(target, "wb") as sink:
                    shutil.copyfileobj(window, sink)
                typer.echo(f"{name}\t{window.tell()}\t{target}")
    except _SOURCE_ERRORS as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
