"""Tests for the markupui command line."""

import threading

import msgspec
import pytest
from typer.testing import CliRunner

from markupui._version import __version__
from markupui.cli import parse_vars, typer_app, wait_for_file

runner = CliRunner()

PAGE = """<script type="text/customui">
    @Title = "X";
    $Menu = "../Menu.ui";
</script>
<div id="main"><h1>@Title</h1></div>
"""


@pytest.fixture
def page(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


def test_version():
    result = runner.invoke(typer_app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"markupui {__version__}"


def test_build_prints_document(page):
    result = runner.invoke(typer_app, ["build", str(page)])

    assert result.exit_code == 0, result.output
    assert result.output.startswith("@MarkupH1 = Label {")
    assert '@Title = "X";' in result.output
    assert result.output.rstrip().endswith("}")


def test_build_with_var_override(page):
    result = runner.invoke(typer_app, ["build", str(page), "--var", "Title=Hello world"])
    assert result.exit_code == 0, result.output
    assert 'Text: "Hello world";' in result.output


def test_build_to_file(page, tmp_path):
    out = tmp_path / "out" / "page.ui"
    result = runner.invoke(typer_app, ["build", str(page), "-o", str(out), "--minimal"])

    assert result.exit_code == 0, result.output
    text = out.read_text(encoding="utf-8")
    assert "Group #Main {\n@MarkupH1 {\nText: \"X\";\n}\n}" in text


def test_build_with_config(page, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text("minimal: true\n")

    result = runner.invoke(typer_app, ["build", str(page), "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "\n  " not in result.output


def test_build_with_invalid_config(page, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text("colour: red\n")

    result = runner.invoke(typer_app, ["build", str(page), "-c", str(config)])
    assert result.exit_code == 1
    assert "Invalid settings" in result.output


def test_build_missing_file(tmp_path):
    result = runner.invoke(typer_app, ["build", str(tmp_path / "missing.html")])
    assert result.exit_code == 1
    assert "Error: File does not exist" in result.output


def test_build_reports_compile_errors(tmp_path):
    bad = tmp_path / "bad.html"
    bad.write_text("<div><table></table></div>", encoding="utf-8")

    result = runner.invoke(typer_app, ["build", str(bad)])
    assert result.exit_code == 1
    assert "Unsupported tag: <table>" in result.output


def test_bad_var_is_a_usage_error(page):
    result = runner.invoke(typer_app, ["build", str(page), "--var", "oops"])
    assert result.exit_code == 2


def test_inspect_prints_json(page):
    result = runner.invoke(typer_app, ["inspect", str(page), "--var", "Title=Y"])

    assert result.exit_code == 0, result.output
    report = msgspec.json.decode(result.output)
    assert report["source"] == str(page.resolve())
    assert report["variables"] == {"Title": "Y"}
    assert report["aliases"]["Menu"] == "../Menu.ui"
    assert report["aliases"]["C"] == "../Common.ui"
    assert report["roots"] == ["Group #Main"]


def test_watch_missing_file(tmp_path):
    result = runner.invoke(
        typer_app, ["watch", str(tmp_path / "missing.html"), "-o", str(tmp_path / "out.ui")]
    )
    assert result.exit_code == 1
    assert "File does not exist" in result.output


def test_parse_vars():
    assert parse_vars(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}
    assert parse_vars(None) == {}


def test_wait_for_file_sees_recreated_file(tmp_path):
    page = tmp_path / "page.html"
    timer = threading.Timer(0.2, page.write_text, args=("<div></div>",))
    timer.start()
    try:
        assert wait_for_file(page, timeout=5.0, interval=0.05)
    finally:
        timer.cancel()


def test_wait_for_file_gives_up(tmp_path):
    assert not wait_for_file(tmp_path / "gone.html", timeout=0.2, interval=0.05)
