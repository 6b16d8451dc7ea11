"""
Mushaf page generator.

Loads page text from a directory of <page>.txt files, fits every line to the
page width and writes the pages to a PDF, optionally with facing-page spreads
and an image preview.
"""

import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor

from font_manager import get_quran_font, list_available_quran_fonts
from mushaf_formats import (
    PAGE_COUNT,
    DEFAULT_BASE_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_STEP_DOWN,
    DEFAULT_STEP_UP,
    DEFAULT_DOCS_DIR,
    default_format,
    paper_Standards,
    get_page_size,
    get_max_font_size,
)
from mushaf_layout.line_fitting import FitConstraints
from mushaf_layout.text_measurer import CachingMeasurer, ReportLabMeasurer
from page_preview import generate_page_image
from page_renderer import PageRenderer
from page_spread import merge_facing_pages
from page_text_provider import DirectoryTextProvider, load_pages

_LOGGER = logging.getLogger(__name__)


def parse_page_range(spec):
    """
    Parse a page selection such as "1-3,7" into a list of page numbers.

    :param spec: Comma separated page numbers and inclusive ranges
    :return: Sorted list of unique page numbers
    """
    pages = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = (int(p) for p in part.split("-", 1))
            else:
                start = end = int(part)
        except ValueError:
            raise ValueError(f"Invalid page selection: '{part}'") from None
        if start > end:
            raise ValueError(f"Invalid page range: '{part}'")
        if start < 1 or end > PAGE_COUNT:
            raise ValueError(f"Pages must be between 1 and {PAGE_COUNT}: '{part}'")
        pages.update(range(start, end + 1))

    if not pages:
        raise ValueError("No pages selected")
    return sorted(pages)


def spread_output_path(output_file):
    root, ext = os.path.splitext(output_file)
    return f"{root}_spread{ext or '.pdf'}"


def generate_mushaf(
    docs_dir,
    output_file,
    pages,
    font=None,
    page_format=default_format,
    constraints=None,
    show_placeholders=False,
    show_debug_lines=False,
    spread=False,
    preview_path=None,
    workers=None,
    allow_download=True,
):
    """
    Generate a PDF of Mushaf pages.

    :param docs_dir: Directory holding <page>.txt files
    :param output_file: Output PDF path
    :param pages: Page numbers to render, in order
    :param font: Path to a .ttf file or registered font name (default: auto-detect)
    :param page_format: Key of mushaf_formats.paper_Standards
    :param constraints: FitConstraints (default: FitConstraints())
    :param show_placeholders: Draw a placeholder on empty lines
    :param show_debug_lines: Draw margins and line slots
    :param spread: Also write a facing-page spread PDF
    :param preview_path: Optional image path for a preview of the first page
    :param workers: Number of threads fitting lines in parallel (default: sequential)
    :param allow_download: Allow downloading a font when none is found
    :return: Dictionary with the written file paths
    """
    page_size = get_page_size(page_format)
    constraints = constraints or FitConstraints()

    slot_limit = get_max_font_size(page_size)
    if constraints.max_font_size > slot_limit:
        _LOGGER.warning(
            f"Max font size {constraints.max_font_size}pt exceeds the {slot_limit:.1f}pt that fit "
            f"a line slot on {page_format}; tall lines may overlap"
        )

    font_name = get_quran_font(font, allow_download=allow_download)
    provider = DirectoryTextProvider(docs_dir)
    mushaf_pages = load_pages(pages, provider)
    measurer = CachingMeasurer(ReportLabMeasurer())

    result = {"pdf": output_file}
    executor = ThreadPoolExecutor(max_workers=workers) if workers else None
    try:
        renderer = PageRenderer(
            font_name,
            page_size=page_size,
            constraints=constraints,
            measurer=measurer,
            show_placeholders=show_placeholders,
            show_debug_lines=show_debug_lines,
            executor=executor,
        )
        renderer.render_pages(mushaf_pages, output_file)
    finally:
        if executor is not None:
            executor.shutdown()

    _LOGGER.debug(f"Measurement cache: {measurer.hits} hits, {measurer.misses} misses")

    if spread:
        result["spread"] = spread_output_path(output_file)
        merge_facing_pages(output_file, result["spread"])

    if preview_path:
        compression = "JPEG" if preview_path.lower().endswith((".jpg", ".jpeg")) else "PNG"
        success, error = generate_page_image(output_file, preview_path, compression=compression)
        if success:
            result["preview"] = preview_path
        else:
            _LOGGER.warning(f"Preview not generated: {error}")

    return result


def build_parser():
    parser = argparse.ArgumentParser(
        description="Render justified 15-line Mushaf pages to PDF"
    )
    parser.add_argument(
        "--docs-dir",
        default=DEFAULT_DOCS_DIR,
        help=f"Directory with one <page>.txt file per page (default: {DEFAULT_DOCS_DIR})",
    )
    parser.add_argument("--pages", default="1", help="Pages to render, e.g. '1-3,7' (default: 1)")
    parser.add_argument("--output", default="mushaf.pdf", help="Output PDF (default: mushaf.pdf)")
    parser.add_argument(
        "--format",
        default=default_format,
        choices=sorted(paper_Standards),
        help=f"Page format (default: {default_format})",
    )
    parser.add_argument("--font", help="Path to a .ttf font or a registered font name")
    parser.add_argument("--no-download", action="store_true", help="Never download a font")
    parser.add_argument("--list-fonts", action="store_true", help="List Quran fonts and exit")
    parser.add_argument("--base-size", type=float, default=DEFAULT_BASE_FONT_SIZE, help="Starting font size")
    parser.add_argument("--min-size", type=float, default=DEFAULT_MIN_FONT_SIZE, help="Smallest font size")
    parser.add_argument("--max-size", type=float, default=DEFAULT_MAX_FONT_SIZE, help="Largest font size")
    parser.add_argument("--step-down", type=float, default=DEFAULT_STEP_DOWN, help="Shrink step for body lines")
    parser.add_argument("--step-up", type=float, default=DEFAULT_STEP_UP, help="Growth step for body lines")
    parser.add_argument("--heading-step-up", type=float, help="Growth step for heading lines (default: 2x step-up)")
    parser.add_argument("--workers", type=int, help="Fit lines in parallel with this many threads")
    parser.add_argument("--spread", action="store_true", help="Also write facing-page spreads")
    parser.add_argument("--preview", help="Write a PNG/JPEG preview of the first page")
    parser.add_argument("--placeholders", action="store_true", help="Mark empty lines")
    parser.add_argument("--debug-lines", action="store_true", help="Draw margins and line slots")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_fonts:
        for kind, fonts in list_available_quran_fonts().items():
            print(f"{kind}: {', '.join(fonts) or '-'}")
        return 0

    try:
        pages = parse_page_range(args.pages)
        constraints = FitConstraints(
            base_font_size=args.base_size,
            min_font_size=args.min_size,
            max_font_size=args.max_size,
            step_down=args.step_down,
            step_up=args.step_up,
            heading_step_up=args.heading_step_up,
        )
    except ValueError as e:
        parser.error(str(e))

    result = generate_mushaf(
        args.docs_dir,
        args.output,
        pages,
        font=args.font,
        page_format=args.format,
        constraints=constraints,
        show_placeholders=args.placeholders,
        show_debug_lines=args.debug_lines,
        spread=args.spread,
        preview_path=args.preview,
        workers=args.workers,
        allow_download=not args.no_download,
    )
    for kind, path in result.items():
        print(f"{kind}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
