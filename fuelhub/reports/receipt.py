"""
Receipt rendering with Pillow and python-barcode.

A receipt is a list of ``(label, value)`` lines drawn on an A5-ish page with
a Code128 barcode of the reference at the bottom, saved as a single page PDF.
"""
import io
import logging
from typing import List, Optional, Tuple
from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger('fuelhub.reports')

PAGE_WIDTH = 620
MARGIN = 40
LINE_HEIGHT = 26
BARCODE_HEIGHT = 90


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 22),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 15),
        )
    except (OSError, IOError):
        default = ImageFont.load_default()
        return default, default


def _barcode_image(value: str, max_width: int) -> Optional[Image.Image]:
    try:
        code128 = barcode.get_barcode_class('code128')
        rendered = code128(value, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 15.0,
            'quiet_zone': 2.0,
            'background': 'white',
            'foreground': 'black',
        })
    except Exception as e:
        logger.error(f"Barcode generation failed for '{value}': {e}")
        return None

    img_width, img_height = rendered.size
    scale = min(max_width / img_width, BARCODE_HEIGHT / img_height)
    size = (max(1, int(img_width * scale)), max(1, int(img_height * scale)))
    return rendered.resize(size, Image.Resampling.BILINEAR)


def render_receipt_pdf(title: str, lines: List[Tuple[str, str]], reference: str) -> bytes:
    """Draw the receipt and return the PDF bytes"""
    font_title, font_body = _load_fonts()
    height = MARGIN * 2 + 60 + LINE_HEIGHT * len(lines) + BARCODE_HEIGHT + 50
    img = Image.new('RGB', (PAGE_WIDTH, height), color='white')
    draw = ImageDraw.Draw(img)

    draw.text((MARGIN, MARGIN), title, fill='black', font=font_title)
    y = MARGIN + 50
    draw.line((MARGIN, y - 10, PAGE_WIDTH - MARGIN, y - 10), fill='black', width=1)

    for label, value in lines:
        draw.text((MARGIN, y), label, fill='black', font=font_body)
        value_text = str(value)
        bbox = draw.textbbox((0, 0), value_text, font=font_body)
        draw.text((PAGE_WIDTH - MARGIN - (bbox[2] - bbox[0]), y), value_text, fill='black', font=font_body)
        y += LINE_HEIGHT

    y += 10
    code_img = _barcode_image(reference, PAGE_WIDTH - 2 * MARGIN)
    if code_img is not None:
        img.paste(code_img, ((PAGE_WIDTH - code_img.size[0]) // 2, y))
        y += code_img.size[1] + 5
    bbox = draw.textbbox((0, 0), reference, font=font_body)
    draw.text(((PAGE_WIDTH - (bbox[2] - bbox[0])) // 2, y), reference, fill='black', font=font_body)

    buffer = io.BytesIO()
    img.save(buffer, format='PDF', resolution=100.0)
    img.close()
    return buffer.getvalue()


def format_cents(cents, currency='ZAR') -> str:
    return f"{currency} {cents / 100:,.2f}"
