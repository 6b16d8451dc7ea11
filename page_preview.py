"""
Image previews of rendered Mushaf pages.
"""

import logging

import fitz  # PyMuPDF

_LOGGER = logging.getLogger(__name__)

IMAGE_FORMATS = {"JPEG": "jpeg", "JPG": "jpeg", "PNG": "png"}


def generate_page_image(
    pdf_path,
    output_path,
    page_num=0,
    width=None,
    dpi=150,
    compression="PNG",
    quality=95,
):
    """
    Rasterize one page of a rendered PDF to PNG or JPEG.

    The scale comes from width (pixels, aspect ratio kept) when given, else
    from dpi. quality only applies to JPEG.

    :param page_num: 0-based page index
    :return: (success, error message or None)
    """
    _LOGGER.info(f"Generating image from PDF page {page_num}: {pdf_path} -> {output_path}")

    image_format = IMAGE_FORMATS.get(compression.upper())
    if image_format is None:
        return False, f"Unsupported image format {compression}. Use one of {sorted(IMAGE_FORMATS)}"

    try:
        with fitz.open(pdf_path) as doc:
            if page_num >= doc.page_count or page_num < 0:
                return (
                    False,
                    f"Invalid page number {page_num}. PDF has {doc.page_count} pages.",
                )

            page = doc.load_page(page_num)
            if width:
                scale = width / page.rect.width
            else:
                scale = dpi / 72.0  # 72 DPI is the default PDF resolution

            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            if image_format == "jpeg":
                pix.save(output_path, output="jpeg", jpg_quality=quality)
            else:
                pix.save(output_path, output="png")

    except (RuntimeError, ValueError, OSError) as e:
        _LOGGER.error(f"Error generating image: {e}")
        return False, str(e)

    _LOGGER.info(f"Image saved to {output_path}")
    return True, None
