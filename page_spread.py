"""
Facing-page spreads for rendered Mushaf PDFs.

An Arabic book opens right to left: the first page of each spread sits on
the right half of the sheet and the following page on the left half.
"""

import logging

from pypdf import PdfReader, PdfWriter, Transformation

_LOGGER = logging.getLogger(__name__)


def points_to_mm(points):
    """Convert points to millimeters"""
    return points / 2.834645669


def get_pdf_page_count(pdf_path):
    """Get the total number of pages in a PDF."""
    return len(PdfReader(pdf_path).pages)


def get_page_size_mm(pdf_path, page_number=0):
    """
    Get page size in millimeters for a specific page.

    Args:
        pdf_path: Path to the PDF file
        page_number: Page number (0-based)

    Returns:
        tuple: (width_mm, height_mm)
    """
    reader = PdfReader(pdf_path)
    if page_number >= len(reader.pages):
        raise IndexError(f"Page {page_number} does not exist")

    box = reader.pages[page_number].mediabox
    return (points_to_mm(float(box.width)), points_to_mm(float(box.height)))


def merge_facing_pages(input_path, output_path, gutter=0.0):
    """
    Place consecutive pages side by side, right to left.

    A trailing odd page gets a sheet of its own with an empty left half.

    Args:
        input_path: PDF with one Mushaf page per PDF page
        output_path: Path of the spread PDF to write
        gutter: Space between the two pages in points

    Returns:
        int: Number of spreads written
    """
    reader = PdfReader(input_path)
    pages = reader.pages
    if len(pages) == 0:
        raise ValueError(f"{input_path} has no pages")

    writer = PdfWriter()
    spreads = 0
    for i in range(0, len(pages), 2):
        right_page = pages[i]
        left_page = pages[i + 1] if i + 1 < len(pages) else None

        width = float(right_page.mediabox.width)
        height = float(right_page.mediabox.height)

        sheet = writer.add_blank_page(width=2 * width + gutter, height=height)
        if left_page is not None:
            sheet.merge_transformed_page(left_page, Transformation().translate(tx=0, ty=0))
        sheet.merge_transformed_page(right_page, Transformation().translate(tx=width + gutter, ty=0))
        spreads += 1

    with open(output_path, "wb") as f_out:
        writer.write(f_out)

    _LOGGER.info(f"Merged {len(pages)} pages into {spreads} spreads: {output_path}")
    return spreads
