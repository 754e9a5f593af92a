"""
Tests for the command line interface.
"""

import json
import pytest
from click.testing import CliRunner
from PIL import Image

from cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def red_png(tmp_path):
    path = tmp_path / "red.png"
    Image.new("RGBA", (8, 6), (255, 0, 0, 255)).save(path)
    return path


def _edits(path):
    return json.loads(path.read_text())


class TestHistoryCommands:
    """Test building history files from the command line."""

    def test_add_filter_creates_file(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        result = runner.invoke(main, ["history", "add-filter", str(history_file), "sepia", "-i", "40"])

        assert result.exit_code == 0, result.output
        assert "Filter: Sepia (40%)" in result.output
        edits = _edits(history_file)
        assert edits[0]["type"] == "filter"
        assert edits[0]["parameters"] == {"filterType": "sepia", "intensity": 40.0}

    def test_show(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        runner.invoke(main, ["history", "add-rotate", str(history_file), "--angle", "90"])
        runner.invoke(main, ["history", "add-crop", str(history_file),
                             "--x", "0", "--y", "0", "-w", "4", "-h", "4"])

        result = runner.invoke(main, ["history", "show", str(history_file)])

        assert result.exit_code == 0
        assert "Rotate (90°)" in result.output
        assert "Crop (4x4 from 0,0)" in result.output

    def test_show_empty(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        history_file.write_text("[]")
        result = runner.invoke(main, ["history", "show", str(history_file)])
        assert "No edits." in result.output

    def test_remove_unknown_id(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        runner.invoke(main, ["history", "add-rotate", str(history_file), "-a", "15"])

        result = runner.invoke(main, ["history", "remove", str(history_file), "nope"])

        assert result.exit_code == 0
        assert "not found" in result.output
        assert len(_edits(history_file)) == 1

    def test_remove_and_undo(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        runner.invoke(main, ["history", "add-rotate", str(history_file), "-a", "15"])
        runner.invoke(main, ["history", "add-adjustment", str(history_file), "-b", "10"])
        edit_id = _edits(history_file)[0]["id"]

        result = runner.invoke(main, ["history", "remove", str(history_file), edit_id])
        assert "Removed edit" in result.output

        result = runner.invoke(main, ["history", "undo", str(history_file)])
        assert "Undid Adjustments: Brightness: 10" in result.output
        assert _edits(history_file) == []

    def test_clear(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        runner.invoke(main, ["history", "add-rotate", str(history_file), "-a", "5"])

        result = runner.invoke(main, ["history", "clear", str(history_file), "--yes"])

        assert result.exit_code == 0
        assert _edits(history_file) == []

    def test_all_zero_adjustment_rejected(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        result = runner.invoke(main, ["history", "add-adjustment", str(history_file)])

        assert result.exit_code != 0
        assert not history_file.exists()

    def test_unreadable_history(self, runner, tmp_path):
        history_file = tmp_path / "edits.json"
        history_file.write_text("{broken")
        result = runner.invoke(main, ["history", "show", str(history_file)])
        assert result.exit_code != 0


class TestRender:
    """Test rendering an edit history onto an image."""

    def test_render_grayscale(self, runner, tmp_path, red_png):
        history_file = tmp_path / "edits.json"
        output = tmp_path / "out.png"
        runner.invoke(main, ["history", "add-filter", str(history_file), "grayscale"])

        result = runner.invoke(main, ["render", str(red_png), str(history_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Applied edits: 1/1" in result.output
        with Image.open(output) as image:
            assert image.size == (8, 6)
            assert image.getpixel((3, 3)) == (85, 85, 85, 255)

    def test_render_crop_quiet(self, runner, tmp_path, red_png):
        history_file = tmp_path / "edits.json"
        output = tmp_path / "out.png"
        runner.invoke(main, ["history", "add-crop", str(history_file),
                             "--x", "2", "--y", "1", "-w", "3", "-h", "2"])

        result = runner.invoke(main, ["--quiet", "render", str(red_png), str(history_file),
                                      "-o", str(output)])

        assert result.exit_code == 0
        assert result.output == ""
        with Image.open(output) as image:
            assert image.size == (3, 2)

    def test_render_unknown_output_format(self, runner, tmp_path, red_png):
        history_file = tmp_path / "edits.json"
        runner.invoke(main, ["history", "add-rotate", str(history_file), "-a", "90"])

        result = runner.invoke(main, ["render", str(red_png), str(history_file),
                                      "-o", str(tmp_path / "out.xyz")])

        assert result.exit_code == 1
        assert "Unsupported image format: XYZ" in result.output
        assert not isinstance(result.exception, KeyError)

    def test_render_bad_history(self, runner, tmp_path, red_png):
        history_file = tmp_path / "edits.json"
        history_file.write_text('[{"type": "crop"}]')

        result = runner.invoke(main, ["render", str(red_png), str(history_file),
                                      "-o", str(tmp_path / "out.png")])

        assert result.exit_code == 1
        assert "missing 'id'" in result.output
        assert not (tmp_path / "out.png").exists()
