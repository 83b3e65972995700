"""QR code rendering for TOTP provisioning URIs."""

import io

import qrcode
from qrcode.image.svg import SvgPathImage

from vouch.domain.service.totp_engine import QRRenderer


class SvgQRRenderer(QRRenderer):
    """Renders QR codes as SVG, which needs no imaging library."""

    def __init__(self, box_size: int = 10, border: int = 4) -> None:
        self.box_size = box_size
        self.border = border

    @property
    def media_type(self) -> str:
        return "image/svg+xml"

    def render_to_image(self, uri: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(uri)
        qr.make(fit=True)

        stream = io.BytesIO()
        qr.make_image(image_factory=SvgPathImage).save(stream)
        return stream.getvalue()
