from __future__ import annotations

import zipfile
from pathlib import Path

from click.testing import CliRunner

from pdf_editor.cli import cli

from conftest import page_widths, rotations


def test_info(sample_pdf: Path) -> None:
    result = CliRunner().invoke(cli, ["info", str(sample_pdf)])

    assert result.exit_code == 0, result.output
    assert "Number of Pages" in result.output
    assert "200.0" in result.output


def test_rotate(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "rotated.pdf"
    result = CliRunner().invoke(cli, ["rotate", str(sample_pdf), "-p", "1,3-4", "-d", "180", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert rotations(output.read_bytes()) == [180, 0, 180, 180, 0]


def test_rotate_invalid_degrees(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "rotated.pdf"
    result = CliRunner().invoke(cli, ["rotate", str(sample_pdf), "-p", "1", "-d", "45", "-o", str(output)])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert not output.exists()


def test_delete_and_move(sample_pdf: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    trimmed = tmp_path / "trimmed.pdf"
    result = runner.invoke(cli, ["delete", str(sample_pdf), "-p", "2-3", "-o", str(trimmed)])
    assert result.exit_code == 0, result.output
    assert len(page_widths(trimmed.read_bytes())) == 3

    result = runner.invoke(cli, ["delete", str(sample_pdf), "-p", "1-5", "-o", str(tmp_path / "none.pdf")])
    assert result.exit_code == 1

    moved = tmp_path / "moved.pdf"
    result = runner.invoke(cli, ["move", str(sample_pdf), "--from", "5", "--to", "1", "-o", str(moved)])
    assert result.exit_code == 0, result.output


def test_extract(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "excerpt.pdf"
    result = CliRunner().invoke(cli, ["extract", str(sample_pdf), "-p", "4,1", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert len(page_widths(output.read_bytes())) == 2


def test_extract_without_valid_pages(sample_pdf: Path, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["extract", str(sample_pdf), "-p", "9", "-o", str(tmp_path / "x.pdf")])
    assert result.exit_code == 1
    assert "1-2,3,4-9,10" in result.output


def test_split_to_directory(sample_pdf: Path, tmp_path: Path) -> None:
    output_dir = tmp_path / "parts"
    result = CliRunner().invoke(cli, ["split", str(sample_pdf), "-r", "1-2,3,4-5", "-o", str(output_dir)])

    assert result.exit_code == 0, result.output
    names = sorted(path.name for path in output_dir.iterdir())
    assert names == ["sample_001.pdf", "sample_002.pdf", "sample_003.pdf"]
    assert len(page_widths((output_dir / "sample_003.pdf").read_bytes())) == 2


def test_split_to_zip(sample_pdf: Path, tmp_path: Path) -> None:
    output_dir = tmp_path / "zipped"
    result = CliRunner().invoke(cli, ["split", str(sample_pdf), "-o", str(output_dir), "--zip"])

    assert result.exit_code == 0, result.output
    with zipfile.ZipFile(output_dir / "sample_split.zip") as archive:
        assert len(archive.namelist()) == 5
        assert archive.namelist()[0] == "sample_001.pdf"


def test_merge(sample_pdfs: list[Path], tmp_path: Path) -> None:
    output = tmp_path / "merged.pdf"
    result = CliRunner().invoke(cli, ["merge", *map(str, sample_pdfs), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert len(page_widths(output.read_bytes())) == 3


def test_crop_and_add_text(sample_pdf: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    cropped = tmp_path / "cropped.pdf"
    result = runner.invoke(
        cli, ["crop", str(sample_pdf), "-p", "1", "--x", "0", "--y", "0", "-w", "100", "-h", "100", "-o", str(cropped)]
    )
    assert result.exit_code == 0, result.output

    stamped = tmp_path / "stamped.pdf"
    result = runner.invoke(
        cli,
        ["add-text", str(sample_pdf), "-p", "1", "-t", "Approved", "--x", "10", "--y", "10",
         "--color", "#cc0000", "-o", str(stamped)],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        cli,
        ["add-text", str(sample_pdf), "-p", "1", "-t", "x", "--x", "0", "--y", "0",
         "--color", "red", "-o", str(tmp_path / "bad.pdf")],
    )
    assert result.exit_code == 1


def test_thumbnails(sample_pdf: Path, tmp_path: Path) -> None:
    output_dir = tmp_path / "thumbs"
    result = CliRunner().invoke(cli, ["thumbnails", str(sample_pdf), "-o", str(output_dir), "--format", "png"])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in output_dir.iterdir())[0] == "sample_001.png"
    assert len(list(output_dir.iterdir())) == 5
