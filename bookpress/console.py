"""Line-oriented console collaborator used for prompts and diagnostics."""

from __future__ import annotations

import sys
import typing as typ

if typ.TYPE_CHECKING:
    from .converter import Diagnostic

DIAGNOSTICS_HEADER = "PrinceXML errors and warnings"


class Console(typ.Protocol):
    """Write lines to the user and, when interactive, read answers back."""

    @property
    def is_interactive(self) -> bool:
        """Return ``True`` when a human can answer prompts."""
        ...

    def write_line(self, text: str = "") -> None:
        """Emit one line of text."""
        ...

    def read_line(self) -> str:
        """Read one line of input without its trailing newline."""
        ...


class StdConsole:
    """Console bound to text streams, defaulting to ``sys.stdin``/``sys.stdout``."""

    def __init__(
        self,
        *,
        stdin: typ.TextIO | None = None,
        stdout: typ.TextIO | None = None,
        interactive: bool | None = None,
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._interactive = interactive

    @property
    def is_interactive(self) -> bool:
        if self._interactive is not None:
            return self._interactive
        isatty = getattr(self._stdin, "isatty", None)
        return bool(isatty and isatty())

    def write_line(self, text: str = "") -> None:
        self._stdout.write(f"{text}\n")
        self._stdout.flush()

    def read_line(self) -> str:
        return self._stdin.readline().rstrip("\r\n")


def format_diagnostics(diagnostics: typ.Sequence[Diagnostic]) -> list[str]:
    """Return the report lines printed after a conversion.

    Returns an empty list when there is nothing to report; otherwise a header,
    an underline and one ``[SEVERITY] text (location)`` line per diagnostic,
    in the order the converter produced them. Message text is printed verbatim.

    Examples
    --------
    >>> from bookpress.converter import Diagnostic
    >>> format_diagnostics([Diagnostic("warning", "book.html:3", "unknown property")])[2]
    '   [WARNING] unknown property (book.html:3)'
    """
    if not diagnostics:
        return []
    lines = [f" {DIAGNOSTICS_HEADER}", f" {'-' * len(DIAGNOSTICS_HEADER)}"]
    for diagnostic in diagnostics:
        location = f" ({diagnostic.location})" if diagnostic.location else ""
        lines.append(f"   [{diagnostic.severity.upper()}] {diagnostic.text}{location}")
    return lines


__all__ = ["Console", "StdConsole", "format_diagnostics"]
