"""End-to-end tests for the stroke-width command line."""

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from strokewidth.cli import app
from strokewidth.io import ResultStore

runner = CliRunner()

METADATA = 'name: "{family}"\nfonts {{\n  name: "{family}"\n  filename: "{filename}"\n}}\n'

# TrueType winding: outer clockwise, hole counter-clockwise
RING_O = [
    [(100, 500), (600, 500), (600, 0), (100, 0)],
    [(180, 80), (520, 80), (520, 420), (180, 420)],
]


@pytest.fixture
def library(tmp_path: Path, font_factory: Callable[..., Path]) -> dict[str, Path]:
    """Fonts root with two tagged families, one of which has an empty "o"."""
    root = tmp_path / "fonts"
    families = {
        "ringsans": ("Ring Sans", "RingSans-Regular.ttf", RING_O),
        "blanksans": ("Blank Sans", "BlankSans-Regular.ttf", []),
    }
    for directory, (family, filename, polygons) in families.items():
        family_dir = root / "ofl" / directory
        family_dir.mkdir(parents=True)
        (family_dir / "METADATA.pb").write_text(METADATA.format(family=family, filename=filename))
        font_factory(family_dir / filename, {"o": polygons}, family=family)

    tags_csv = tmp_path / "families.csv"
    tags_csv.write_text(
        "Family,Location,Tag,Value\n"
        "Ring Sans,,/Sans/Geometric,80\n"
        "Blank Sans,,/Sans/Geometric,10\n"
    )
    return {"root": root, "tags": tags_csv, "store": tmp_path / "widths.jsonl"}


def batch_args(library: dict[str, Path], *extra: str) -> list[str]:
    return [
        "batch",
        "--tag-filter", "/Sans",
        "--fonts-root", str(library["root"]),
        "--tags-csv", str(library["tags"]),
        "--store", str(library["store"]),
        "--workers", "1",
        *extra,
    ]


class TestMeasure:
    """Tests for the measure command."""

    def test_measures_ring(self, ring_font: Path) -> None:
        result = runner.invoke(app, ["measure", "o", str(ring_font)])
        assert result.exit_code == 0, result.output
        assert "80.00" in result.output

    def test_all_segments(self, ring_font: Path) -> None:
        result = runner.invoke(app, ["measure", "o", str(ring_font), "--method", "all-segments"])
        assert result.exit_code == 0, result.output
        assert "80.00" in result.output

    def test_empty_glyph_fails(self, ring_font: Path) -> None:
        result = runner.invoke(app, ["measure", " ", str(ring_font)])
        assert result.exit_code == 1
        assert "DegenerateGeometryError" in result.output

    def test_missing_font(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["measure", "o", str(tmp_path / "missing.ttf")])
        assert result.exit_code == 1

    def test_rejects_multiple_characters(self, ring_font: Path) -> None:
        result = runner.invoke(app, ["measure", "oo", str(ring_font)])
        assert result.exit_code == 1

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "Stroke Width" in result.output


class TestBatch:
    """Tests for the batch and export commands."""

    def test_failed_family_sets_exit_code(self, library: dict[str, Path]) -> None:
        result = runner.invoke(app, batch_args(library))
        assert result.exit_code == 1, result.output

        store = ResultStore(library["store"])
        assert len(store) == 2
        assert [r.task.family for r in store.results() if r.estimate] == ["Ring Sans"]

    def test_family_filter(self, library: dict[str, Path]) -> None:
        result = runner.invoke(app, batch_args(library, "--family-filter", "^Ring"))
        assert result.exit_code == 0, result.output
        assert len(ResultStore(library["store"])) == 1

    def test_rerun_skips(self, library: dict[str, Path]) -> None:
        runner.invoke(app, batch_args(library, "--family-filter", "^Ring"))
        before = library["store"].read_bytes()

        result = runner.invoke(app, batch_args(library, "--family-filter", "^Ring"))
        assert result.exit_code == 0, result.output
        assert "1 skipped" in result.output
        assert library["store"].read_bytes() == before

    def test_default_only(self, library: dict[str, Path]) -> None:
        args = batch_args(library, "--family-filter", "^Ring", "--default-only")
        result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output

        results = list(ResultStore(library["store"]).results())
        assert [r.task.location for r in results] == [()]

    def test_quiet(self, library: dict[str, Path]) -> None:
        result = runner.invoke(app, batch_args(library, "--family-filter", "^Ring", "--quiet"))
        assert result.exit_code == 0, result.output

    def test_bad_tag_filter(self, library: dict[str, Path]) -> None:
        args = batch_args(library)
        args[args.index("/Sans")] = "(unclosed"
        result = runner.invoke(app, args)
        assert result.exit_code == 1

    def test_parallel_workers(self, library: dict[str, Path]) -> None:
        args = batch_args(library)
        args[args.index("--workers") + 1] = "2"
        result = runner.invoke(app, args)
        assert result.exit_code == 1, result.output

        store = ResultStore(library["store"])
        widths = [r.estimate.width for r in store.results() if r.estimate]
        assert widths == [pytest.approx(80.0)]

    def test_export(self, library: dict[str, Path]) -> None:
        runner.invoke(app, batch_args(library))
        result = runner.invoke(app, ["export", "--store", str(library["store"])])

        assert result.exit_code == 0, result.output
        assert "Ring Sans,,/quant/stroke_width,80.00" in result.output
        assert "Blank Sans" not in result.output

    def test_export_to_file(self, library: dict[str, Path], tmp_path: Path) -> None:
        runner.invoke(app, batch_args(library))
        output = tmp_path / "quant.csv"
        result = runner.invoke(app, ["export", "--store", str(library["store"]), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.read_text().splitlines()[0] == "Ring Sans,,/quant/stroke_width,80.00"
