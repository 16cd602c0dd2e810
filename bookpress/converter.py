r"""PrinceXML conversion adapter and converter discovery.

:class:`PrinceConverter` shells out to the ``prince`` executable with
``--structured-log=normal`` and turns its ``msg|...`` log lines into
:class:`Diagnostic` values. :func:`locate_converter` implements the lookup
policy: configured path, then well-known install locations and ``PATH``, then
an interactive prompt, and finally a configuration error that explains how to
set the path.

Example
-------
>>> parse_structured_log("msg|wrn|book.html:12|unknown property\nfin|success\n")
([Diagnostic(severity='warning', location='book.html:12', text='unknown property')], True)
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import subprocess
import typing as typ
from pathlib import Path

from .errors import ConversionFailed, ConversionUnavailable

if typ.TYPE_CHECKING:
    from .console import Console

logger = logging.getLogger(__name__)

DEFAULT_CONVERTER_PATHS: tuple[str, ...] = (
    "/usr/local/bin/prince",
    "/usr/bin/prince",
    "/opt/homebrew/bin/prince",
    r"C:\Program Files\Prince\engine\bin\prince.exe",
    r"C:\Program Files (x86)\Prince\engine\bin\prince.exe",
)
DOWNLOAD_URL = "https://www.princexml.com/download"
SAMPLE_CONFIG = """\
  converter:
      path: '/path/to/utils/PrinceXML/prince'

  book:
      title:  ...
      author: ...
      # ...
"""
_SEVERITIES = {"err": "error", "wrn": "warning", "inf": "info", "dbg": "debug"}


@dc.dataclass(frozen=True, slots=True)
class Diagnostic:
    """A message reported by the converter; informational only."""

    severity: str
    location: str
    text: str


class Converter(typ.Protocol):
    """Turn a composed HTML document into the final artifact."""

    def convert(
        self,
        input_path: Path,
        stylesheet_paths: typ.Sequence[Path],
        output_path: Path,
        *,
        base_url: str | None = None,
    ) -> list[Diagnostic]:
        """Write ``output_path`` and return diagnostics in emission order."""
        ...


def parse_structured_log(output: str) -> tuple[list[Diagnostic], bool | None]:
    """Split Prince's structured log into diagnostics and the final outcome.

    Returns
    -------
    tuple[list[Diagnostic], bool | None]
        Diagnostics in the order emitted and ``True``/``False`` from the
        ``fin|`` line, or ``None`` when no outcome line was printed.
    """
    diagnostics: list[Diagnostic] = []
    outcome: bool | None = None
    for line in output.splitlines():
        parts = line.split("|", 3)
        match parts:
            case ["msg", severity, location, text]:
                diagnostics.append(
                    Diagnostic(
                        severity=_SEVERITIES.get(severity, severity),
                        location=location.strip(),
                        text=text.strip(),
                    )
                )
            case ["fin", status, *_]:
                outcome = status.strip() == "success"
            case _:
                continue
    return diagnostics, outcome


class PrinceConverter:
    """Invoke the PrinceXML command-line converter."""

    def __init__(self, executable: Path | str, *, timeout: float | None = None) -> None:
        self.executable = Path(executable)
        self.timeout = timeout

    def build_command(
        self,
        input_path: Path,
        stylesheet_paths: typ.Sequence[Path],
        output_path: Path,
        *,
        base_url: str | None = None,
    ) -> list[str]:
        """Return the argument vector passed to ``prince``."""
        command = [str(self.executable), "--structured-log=normal"]
        if base_url:
            command += ["--baseurl", base_url]
        for stylesheet in stylesheet_paths:
            command += ["-s", str(stylesheet)]
        command += [str(input_path), "-o", str(output_path)]
        return command

    def convert(
        self,
        input_path: Path,
        stylesheet_paths: typ.Sequence[Path],
        output_path: Path,
        *,
        base_url: str | None = None,
    ) -> list[Diagnostic]:
        """Convert ``input_path`` into ``output_path``.

        Raises
        ------
        ConversionUnavailable
            If the executable is missing or cannot be started.
        ConversionFailed
            If Prince reports failure or no output file is produced.
        """
        command = self.build_command(
            input_path, stylesheet_paths, output_path, base_url=base_url
        )
        logger.info("running %s", " ".join(command))
        try:
            completed = subprocess.run(  # noqa: S603 - executable resolved by locate_converter
                command,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except OSError as exc:
            msg = f"Unable to run PrinceXML at '{self.executable}': {exc}"
            raise ConversionUnavailable(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"PrinceXML did not finish within {self.timeout} seconds."
            raise ConversionFailed(msg) from exc

        diagnostics, outcome = parse_structured_log(
            "\n".join(filter(None, (completed.stdout, completed.stderr)))
        )
        if outcome is False or completed.returncode != 0:
            msg = f"PrinceXML failed to convert '{input_path.name}' (exit {completed.returncode})."
            raise ConversionFailed(msg, diagnostics)
        if not output_path.exists():
            msg = f"PrinceXML finished but did not write '{output_path}'."
            raise ConversionFailed(msg, diagnostics)
        return diagnostics


def locate_converter(
    configured: Path | str | None,
    *,
    default_paths: typ.Iterable[str] = DEFAULT_CONVERTER_PATHS,
    console: Console | None = None,
) -> Path:
    """Return the path of the ``prince`` executable.

    Parameters
    ----------
    configured : Path or str, optional
        Path from the book configuration or CLI; used when it exists.
    default_paths : Iterable[str], optional
        Well-known install locations tried in order.
    console : Console, optional
        Collaborator used to ask for a path when nothing was found. Without an
        interactive console the lookup fails instead.

    Raises
    ------
    ConversionUnavailable
        If no executable is found and nobody can be asked, or the answer given
        at the prompt does not exist.
    """
    if configured and Path(configured).exists():
        return Path(configured)
    search = list(default_paths)
    for candidate in search:
        if Path(candidate).exists():
            return Path(candidate)
    on_path = shutil.which("prince")
    if on_path:
        return Path(on_path)

    if console is None or not console.is_interactive:
        msg = (
            "ERROR: The PrinceXML library needed to generate PDF books cannot be found.\n"
            " Check that you have installed PrinceXML in a common directory \n"
            " or set your custom PrinceXML path in the book's config.yml file:\n\n"
            f"{SAMPLE_CONFIG}"
        )
        raise ConversionUnavailable(msg)

    answer = _ask_for_converter_path(console, search)
    if not answer or not Path(answer).exists():
        msg = f"PrinceXML executable not found at '{answer}'."
        raise ConversionUnavailable(msg)
    return Path(answer)


def _ask_for_converter_path(console: Console, searched: list[str]) -> str:
    console.write_line(
        " In order to generate PDF files, PrinceXML library must be installed."
    )
    console.write_line()
    console.write_line(
        " We couldn't find PrinceXML executable in any of the following directories:"
    )
    for path in searched:
        console.write_line(f"   -> {path}")
    console.write_line()
    console.write_line(
        " If you haven't installed it yet, you can download a fully-functional demo at:"
    )
    console.write_line(f" {DOWNLOAD_URL}")
    console.write_line()
    console.write_line(
        " If you have installed in a custom directory, please type its full absolute path:"
    )
    answer = console.read_line().strip()
    console.write_line()
    return answer


__all__ = [
    "DEFAULT_CONVERTER_PATHS",
    "Converter",
    "Diagnostic",
    "PrinceConverter",
    "locate_converter",
    "parse_structured_log",
]
