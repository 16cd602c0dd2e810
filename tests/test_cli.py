from __future__ import annotations

import io
from pathlib import Path

import pytest

from bookpress import cli
from bookpress.cli import ExitCode, run_publish
from bookpress.console import StdConsole
from bookpress.errors import ParseError
from bookpress.parser import MarkdownContentParser
from bookpress.plugins import TitlePlugin


def test_run_publish_success(
    sample_book: Path, fake_converter, quiet_console, capsys, tmp_path: Path
) -> None:
    code = run_publish(
        sample_book,
        output_dir=tmp_path / "dist",
        console=quiet_console,
        converter=fake_converter,
    )

    assert code is ExitCode.SUCCESS
    assert (tmp_path / "dist" / "sample.pdf").exists()
    assert "wrote" in capsys.readouterr().out


def test_missing_book_directory_is_no_input(tmp_path: Path, capsys) -> None:
    code = run_publish(tmp_path / "absent")

    assert code is ExitCode.NO_INPUT
    assert "not found" in capsys.readouterr().err


def test_missing_config_is_config_error(tmp_path: Path, quiet_console, capsys) -> None:
    code = run_publish(tmp_path, console=quiet_console)

    assert code is ExitCode.CONFIG_ERROR
    assert "config.yml" in capsys.readouterr().err


def test_unknown_edition_is_config_error(
    sample_book: Path, fake_converter, quiet_console
) -> None:
    code = run_publish(
        sample_book, edition="ebook", console=quiet_console, converter=fake_converter
    )

    assert code is ExitCode.CONFIG_ERROR


def test_unavailable_converter_is_config_error_without_artifact(
    sample_book: Path, tmp_path: Path, mocker, capsys
) -> None:
    mocker.patch("bookpress.converter.shutil.which", return_value=None)
    console = StdConsole(stdin=io.StringIO(), stdout=io.StringIO(), interactive=False)

    code = run_publish(
        sample_book,
        converter_path=tmp_path / "missing-prince",
        console=console,
    )

    assert code is ExitCode.CONFIG_ERROR
    assert "PrinceXML" in capsys.readouterr().err
    assert not (sample_book / "Output").exists()


def test_parse_failure_is_failure(
    sample_book: Path, fake_converter, quiet_console, mocker
) -> None:
    mocker.patch.object(
        MarkdownContentParser, "parse", side_effect=ParseError("broken markdown")
    )

    code = run_publish(sample_book, console=quiet_console, converter=fake_converter)

    assert code is ExitCode.FAILURE
    assert fake_converter.calls == []


def test_conversion_failure_is_failure(
    sample_book: Path, fake_converter, quiet_console, capsys
) -> None:
    fake_converter.fail = True

    code = run_publish(sample_book, console=quiet_console, converter=fake_converter)

    assert code is ExitCode.FAILURE
    assert "Conversion failed" in capsys.readouterr().err


def test_publish_command_exits_with_code(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.publish(tmp_path / "absent")

    assert excinfo.value.code == ExitCode.NO_INPUT


def test_editions_command_lists_editions(sample_book: Path, capsys) -> None:
    cli.editions(sample_book)

    assert capsys.readouterr().out.splitlines() == [
        "print: pdf -> sample.pdf (default)",
        "screen: pdf -> book.pdf",
    ]


def test_editions_command_rejects_invalid_config(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.editions(tmp_path)

    assert excinfo.value.code == ExitCode.CONFIG_ERROR


def test_malformed_yaml_is_config_error(tmp_path: Path, quiet_console) -> None:
    (tmp_path / "config.yml").write_text("book: [unclosed\n", encoding="utf-8")

    assert run_publish(tmp_path, console=quiet_console) is ExitCode.CONFIG_ERROR


def test_invalid_toc_depth_is_config_error(
    sample_book: Path, fake_converter, quiet_console, capsys
) -> None:
    config_path = sample_book / "config.yml"
    config_path.write_text(
        config_path.read_text(encoding="utf-8").replace(
            "      output: sample.pdf\n",
            "      output: sample.pdf\n      toc: { deep: two }\n",
        ),
        encoding="utf-8",
    )

    code = run_publish(sample_book, console=quiet_console, converter=fake_converter)

    assert code is ExitCode.CONFIG_ERROR
    assert "invalid toc depth" in capsys.readouterr().err
    assert fake_converter.calls == []


def test_unexpected_hook_error_is_failure(
    sample_book: Path, fake_converter, quiet_console, mocker, capsys
) -> None:
    mocker.patch.object(
        TitlePlugin, "on_post_parse", side_effect=RuntimeError("plugin exploded")
    )

    code = run_publish(sample_book, console=quiet_console, converter=fake_converter)

    assert code is ExitCode.FAILURE
    assert "RuntimeError: plugin exploded" in capsys.readouterr().err
    assert fake_converter.calls == []
