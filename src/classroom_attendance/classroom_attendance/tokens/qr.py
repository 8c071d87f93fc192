from __future__ import annotations

import io
import threading
from typing import IO, Iterable, Optional

import qrcode
from PIL import Image


def render_png(text: str) -> bytes:
    """Render ``text`` as a QR code PNG."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_image(img: Image.Image) -> Optional[str]:
    """Return the text of the first QR code found in ``img``."""

    # zbar is a native library; only needed when images are actually decoded.
    from pyzbar.pyzbar import decode as pyzbar_decode

    decoded = pyzbar_decode(img.convert("RGB"))
    if not decoded:
        return None
    text = decoded[0].data.decode("utf-8").strip()
    return text or None


def decode_upload(stream: IO[bytes]) -> Optional[str]:
    return decode_image(Image.open(stream))


def wait_for_token(frames: Iterable[Image.Image], cancel: threading.Event) -> Optional[str]:
    """Consume camera frames until one holds a QR code.

    Returns None when the frame source ends or ``cancel`` is set, e.g. because
    the scanning view was closed.
    """

    for frame in frames:
        if cancel.is_set():
            return None
        text = decode_image(frame)
        if text:
            return text
    return None
