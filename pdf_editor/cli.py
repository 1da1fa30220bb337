"""
Command-line interface for the PDF editor core.
"""

import logging
import os
import sys
import zipfile
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from pdf_editor import __version__
from pdf_editor.config import EditorSettings, IMAGE_FORMATS
from pdf_editor.engine import MutationEngine
from pdf_editor.exceptions import InvalidRangeError, PDFEditorException
from pdf_editor.ranges import EXAMPLE_RULES, parse_merge_rules, rules_for_every_page, format_rule
from pdf_editor.synchronizer import ModelSynchronizer
from pdf_editor.types import CropBox, TextAnnotation
from pdf_editor.utils import configure_logging, format_file_size, numbered_names, strip_pdf_suffix

console = Console()


def _fail(error):
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(error))}")
    sys.exit(1)


def _read_pdf(path):
    return Path(path).read_bytes()


def _write_pdf(path, data):
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    console.print(f"[bold green]✓ Saved[/bold green] {output} [dim]({format_file_size(len(data))})[/dim]")


def _page_indices(text, page_count):
    """Expand a 1-based page list such as ``1,3-5`` into 0-based indices."""
    rules = parse_merge_rules(text, page_count)
    if not rules:
        raise InvalidRangeError(f"No valid pages in '{text}'. Example: {EXAMPLE_RULES}")
    indices = []
    for rule in rules:
        indices.extend(rule.indices())
    return indices


def _page_index(page, page_count):
    if page < 1 or page > page_count:
        raise InvalidRangeError(f"Page {page} is out of range (1-{page_count})")
    return page - 1


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    PDF Editor CLI - Rotate, crop, annotate, reorder, split and merge PDF pages.
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True))
def show_info(input_pdf):
    """
    Display page information about a PDF file.

    Example:

        pdf-editor info input.pdf
    """
    try:
        data = _read_pdf(input_pdf)
        sizes = MutationEngine().page_sizes(data)

        table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}")
        table.add_column("Page", style="cyan", no_wrap=True)
        table.add_column("Width (pt)", style="green", justify="right")
        table.add_column("Height (pt)", style="green", justify="right")
        for number, (width, height) in enumerate(sizes, start=1):
            table.add_row(str(number), f"{width:.1f}", f"{height:.1f}")

        console.print()
        console.print(f"[bold]File Size:[/bold] {format_file_size(len(data))}")
        console.print(f"[bold]Number of Pages:[/bold] {len(sizes)}")
        console.print(table)
        console.print()

    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="rotate")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--pages', '-p', required=True, help='Pages to rotate, e.g. "1,3-5"', type=str)
@click.option('--degrees', '-d', default=90, help='Rotation in degrees (multiple of 90)', type=int)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def rotate(input_pdf, pages, degrees, output):
    """
    Rotate pages by a multiple of 90 degrees.

    Example:

        pdf-editor rotate input.pdf -p 1,3 -d 180 -o rotated.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        indices = _page_indices(pages, engine.page_count(data))
        _write_pdf(output, engine.rotate(data, indices, degrees))
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="crop")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--page', '-p', required=True, help='Page number (1-indexed)', type=int)
@click.option('--x', 'x', required=True, help='Left edge in points from the top-left corner', type=float)
@click.option('--y', 'y', required=True, help='Top edge in points from the top-left corner', type=float)
@click.option('--width', '-w', required=True, help='Crop width in points', type=float)
@click.option('--height', '-h', required=True, help='Crop height in points', type=float)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def crop(input_pdf, page, x, y, width, height, output):
    """
    Crop one page to a rectangle measured from its top-left corner.

    Example:

        pdf-editor crop input.pdf -p 1 --x 36 --y 36 -w 300 -h 400 -o cropped.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        sizes = engine.page_sizes(data)
        index = _page_index(page, len(sizes))
        page_width, page_height = sizes[index]
        result = engine.crop(data, index, CropBox(x, y, width, height), page_width, page_height)
        _write_pdf(output, result)
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="add-text")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--page', '-p', required=True, help='Page number (1-indexed)', type=int)
@click.option('--text', '-t', required=True, help='Text to draw', type=str)
@click.option('--x', 'x', required=True, help='Left edge in points from the top-left corner', type=float)
@click.option('--y', 'y', required=True, help='Top edge in points from the top-left corner', type=float)
@click.option('--font-size', default=16, help='Font size in points', type=float)
@click.option('--font', default='Helvetica', help='Standard PDF font name', type=str)
@click.option('--color', default='#000000', help='Text colour as #RRGGBB', type=str)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def add_text(input_pdf, page, text, x, y, font_size, font, color, output):
    """
    Draw text onto a page.

    Example:

        pdf-editor add-text input.pdf -p 2 -t "Approved" --x 50 --y 40 --color "#cc0000" -o stamped.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        index = _page_index(page, engine.page_count(data))
        annotation = TextAnnotation(text=text, x=x, y=y, font_size=font_size, font_family=font, color=color)
        _write_pdf(output, engine.add_text(data, index, [annotation]))
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="delete")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--pages', '-p', required=True, help='Pages to delete, e.g. "2,4-6"', type=str)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def delete(input_pdf, pages, output):
    """
    Delete pages. At least one page must remain.

    Example:

        pdf-editor delete input.pdf -p 2,4-6 -o trimmed.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        indices = _page_indices(pages, engine.page_count(data))
        _write_pdf(output, engine.delete_pages(data, indices))
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="move")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--from', 'from_page', required=True, help='Page to move (1-indexed)', type=int)
@click.option('--to', 'to_page', required=True, help='New position (1-indexed)', type=int)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def move(input_pdf, from_page, to_page, output):
    """
    Move one page to a new position.

    Example:

        pdf-editor move input.pdf --from 5 --to 1 -o reordered.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        count = engine.page_count(data)
        result = engine.move_page(data, _page_index(from_page, count), _page_index(to_page, count))
        _write_pdf(output, result)
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="extract")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--pages', '-p', required=True, help='Pages to extract in output order, e.g. "3,1-2"', type=str)
@click.option('--output', '-o', required=True, help='Output PDF path', type=click.Path())
def extract(input_pdf, pages, output):
    """
    Extract pages into a new PDF, in the order given.

    Example:

        pdf-editor extract input.pdf -p 1-3,7 -o excerpt.pdf
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        indices = _page_indices(pages, engine.page_count(data))
        _write_pdf(output, engine.extract_pages(data, indices))
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="split")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option(
    '--rules', '-r',
    default='',
    help=f'Comma separated page ranges, e.g. "{EXAMPLE_RULES}". Blank splits every page',
    type=str
)
@click.option('--output-dir', '-o', default='./output', help='Output directory', type=click.Path())
@click.option('--zip', 'as_zip', is_flag=True, help='Write the parts into one ZIP archive')
@click.option('--padding', default=3, help='Number of digits for part numbering', type=int)
def split(input_pdf, rules, output_dir, as_zip, padding):
    """
    Split a PDF into one file per range.

    Examples:

        pdf-editor split input.pdf

        pdf-editor split input.pdf -r "1-2,3,4-9,10" --zip
    """
    try:
        engine = MutationEngine()
        data = _read_pdf(input_pdf)
        count = engine.page_count(data)
        parsed = parse_merge_rules(rules, count) if rules.strip() else rules_for_every_page(count)
        if not parsed:
            raise InvalidRangeError(f"No valid split rules in '{rules}'. Example: {EXAMPLE_RULES}")

        console.print(f"\n[bold cyan]Splitting into {len(parsed)} parts:[/bold cyan] "
                      f"{', '.join(format_rule(rule) for rule in parsed)}")
        parts = engine.split(data, parsed)

        name = strip_pdf_suffix(os.path.basename(input_pdf))
        names = numbered_names([name] * len(parts), padding)
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console
        ) as progress:
            task = progress.add_task("Writing parts", total=len(parts))
            if as_zip:
                archive = output_path / f"{name}_split.zip"
                with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
                    for part_name, part in zip(names, parts):
                        bundle.writestr(part_name, part)
                        progress.advance(task)
                created = [archive]
            else:
                created = []
                for part_name, part in zip(names, parts):
                    target = output_path / part_name
                    target.write_bytes(part)
                    created.append(target)
                    progress.advance(task)

        console.print(f"\n[bold green]✓ Successfully split into {len(parts)} files[/bold green]")
        console.print(f"[dim]Output directory: {output_path.resolve()}[/dim]")
        for path in created[:5]:
            console.print(f"  • {path.name}")
        if len(created) > 5:
            console.print(f"  ... and {len(created) - 5} more")
        console.print()

    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="merge")
@click.argument('input_pdfs', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--output', '-o', default='merged_document.pdf', help='Output PDF path', type=click.Path())
def merge(input_pdfs, output):
    """
    Merge PDFs in the order given.

    Example:

        pdf-editor merge a.pdf b.pdf c.pdf -o merged.pdf
    """
    try:
        buffers = [_read_pdf(path) for path in input_pdfs]
        _write_pdf(output, MutationEngine().merge(buffers))
    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


@cli.command(name="thumbnails")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--output-dir', '-o', default='./thumbnails', help='Output directory', type=click.Path())
@click.option('--scale', '-s', default=0.3, help='Render scale relative to 72 dpi', type=float)
@click.option(
    '--format', 'image_format',
    default='JPEG',
    help='Image format',
    type=click.Choice(IMAGE_FORMATS, case_sensitive=False)
)
@click.option('--quality', '-q', default=70, help='JPEG quality (1-100)', type=int)
def thumbnails(input_pdf, output_dir, scale, image_format, quality):
    """
    Render a thumbnail image for every page.

    Example:

        pdf-editor thumbnails input.pdf -o thumbs --format PNG
    """
    try:
        settings = EditorSettings().with_updates(
            thumbnail_scale=scale, image_format=image_format.upper(), image_quality=quality
        )
        pages = ModelSynchronizer(settings=settings).build_pages(_read_pdf(input_pdf))

        extension = "jpg" if settings.image_format == "JPEG" else "png"
        name = strip_pdf_suffix(os.path.basename(input_pdf))
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        for page in pages:
            (output_path / f"{name}_{page.index + 1:03d}.{extension}").write_bytes(page.thumbnail)

        console.print(f"\n[bold green]✓ Rendered {len(pages)} thumbnails[/bold green]")
        console.print(f"[dim]Output directory: {output_path.resolve()}[/dim]\n")

    except PDFEditorException as e:
        _fail(e)
    except OSError as e:
        _fail(e)


if __name__ == '__main__':
    cli()
