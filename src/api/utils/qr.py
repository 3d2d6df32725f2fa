import io

import qrcode


def render_qr_png(payload: str) -> bytes:
    """Render a credential as a PNG QR image."""
    img = qrcode.make(payload)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
