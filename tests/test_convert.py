"""
CLI tests for convert.py.
"""

import io
import json
from pathlib import Path

import pytest

import convert


@pytest.fixture
def post_file(tmp_path: Path) -> Path:
    path = tmp_path / "post.txt"
    path.write_text("* Ability: [[charm]]\n\n**bold**", encoding="utf-8")
    return path


class TestConvertCli:
    def test_formats_file(self, post_file: Path, capsys) -> None:
        convert.main([str(post_file)])

        out = capsys.readouterr().out
        assert out.startswith("<ul><li>Ability: <i class=\"phg-charm-power\"")
        assert out.endswith("\n\n<p><b>bold</b></p>\n")

    def test_effect_mode(self, post_file: Path, capsys) -> None:
        convert.main([str(post_file), "--effect"])

        out = capsys.readouterr().out
        assert out.startswith(
            '<div class="inexhaustible-effects"><p><strong>Ability:</strong>'
        )

    def test_reads_stdin(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("plain text"))

        convert.main(["--ensure-paragraphs"])

        assert capsys.readouterr().out == "<p>plain text</p>\n"

    def test_json_tree(self, post_file: Path, capsys) -> None:
        convert.main([str(post_file), "--json", "--effect"])

        tree = json.loads(capsys.readouterr().out)
        assert [node["type"] for node in tree] == ["effect_box", "paragraph"]
        assert tree[0]["effect"] == "inexhaustible"

    def test_text_mode(self, post_file: Path, capsys) -> None:
        convert.main([str(post_file), "--text"])

        assert capsys.readouterr().out == "Ability: bold\n"

    def test_check_passes_clean_output(self, post_file: Path, capsys) -> None:
        convert.main([str(post_file), "--check"])

        assert capsys.readouterr().err == ""

    def test_writes_output_file(self, post_file: Path, tmp_path: Path) -> None:
        target = tmp_path / "out.html"

        convert.main([str(post_file), "-o", str(target)])

        assert target.read_text(encoding="utf-8").endswith("<p><b>bold</b></p>\n")

    def test_missing_file_exits(self, tmp_path: Path, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            convert.main([str(tmp_path / "nope.txt")])

        assert exc.value.code == 1
        assert "file not found" in capsys.readouterr().err
