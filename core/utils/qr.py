import logging
from io import BytesIO
import qrcode
from qrcode.constants import ERROR_CORRECT_H
from PIL import Image

logger = logging.getLogger(__name__)

MIN_SIZE = 256

def book_history_url(base_url: str, book_id: str) -> str:
    """Permanent public URL of a book's history page"""
    return f"{base_url.rstrip('/')}/book-history/{book_id}"

def render_qr_png(data: str, min_size: int = MIN_SIZE) -> bytes:
    """Render data as a black-on-white PNG QR code.

    Args:
        data: Text to encode
        min_size: Smallest width/height in pixels

    Returns:
        PNG image as bytes
    """
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image().convert('RGB')

    # Scale up small codes without blurring module edges
    if img.width < min_size:
        factor = -(-min_size // img.width)
        img = img.resize((img.width * factor, img.height * factor), Image.Resampling.NEAREST)

    output = BytesIO()
    img.save(output, format='PNG', optimize=True)
    return output.getvalue()
