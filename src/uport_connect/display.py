"""Terminal QR display used when the app supplies no URI handler."""

from __future__ import annotations

import sys
from typing import TextIO

import qrcode

_FULL = "█"
_UPPER = "▀"
_LOWER = "▄"
_BLANK = " "


def qr_matrix(text: str, border: int = 2) -> list[list[bool]]:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=1,
        border=max(0, border),
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr.get_matrix()


def render_qr(text: str) -> str:
    """Render text as a QR code drawn with half-block characters."""

    matrix = qr_matrix(text)
    if not matrix:
        return text

    width = len(matrix[0])
    lines: list[str] = []
    for y in range(0, len(matrix), 2):
        top = matrix[y]
        bottom = matrix[y + 1] if y + 1 < len(matrix) else [False] * width
        row = []
        for x in range(width):
            if top[x] and bottom[x]:
                row.append(_FULL)
            elif top[x]:
                row.append(_UPPER)
            elif bottom[x]:
                row.append(_LOWER)
            else:
                row.append(_BLANK)
        lines.append("".join(row))
    return "\n".join(lines)


class TerminalQRDisplay:
    """Show request URIs as scannable QR codes on a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.is_open = False

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def open(self, uri: str) -> None:
        self.stream.write(f"{render_qr(uri)}\n\nScan with uPort to continue:\n{uri}\n")
        self.stream.flush()
        self.is_open = True

    def close(self) -> None:
        if not self.is_open:
            return
        self.stream.write("uPort request completed.\n")
        self.stream.flush()
        self.is_open = False
