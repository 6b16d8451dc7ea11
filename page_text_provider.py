"""
Page text providers.

A provider returns the raw text of a Mushaf page, one line per text row.
Loading is asynchronous; everything after it (normalizing, classifying,
fitting) is synchronous.
"""

import asyncio
import logging
import os

from mushaf_layout.page_lines import PAGE_COUNT, build_page, blank_page

_LOGGER = logging.getLogger(__name__)


class PageTextLoadError(Exception):
    """Raised when the text of a page cannot be loaded."""


class TextProvider:
    async def load_page_text(self, page_number):
        raise NotImplementedError


class DirectoryTextProvider(TextProvider):
    """Reads page text from <docs_dir>/<page_number>.txt files."""

    def __init__(self, docs_dir, encoding="utf-8"):
        self.docs_dir = docs_dir
        self.encoding = encoding

    def page_path(self, page_number):
        return os.path.join(self.docs_dir, f"{page_number}.txt")

    def _read(self, path):
        with open(path, "r", encoding=self.encoding) as f:
            return f.read()

    async def load_page_text(self, page_number):
        path = self.page_path(page_number)
        try:
            return await asyncio.to_thread(self._read, path)
        except (OSError, UnicodeDecodeError) as e:
            raise PageTextLoadError(f"Could not load text for page {page_number} from {path}: {e}") from e


class MappingTextProvider(TextProvider):
    """Serves page text from an in-memory mapping of page number to text."""

    def __init__(self, pages):
        self.pages = dict(pages)

    async def load_page_text(self, page_number):
        try:
            return self.pages[page_number]
        except KeyError:
            raise PageTextLoadError(f"No text for page {page_number}") from None


async def assemble_page(page_number, provider):
    """
    Load and build one page.

    A page whose text cannot be loaded becomes a page of 15 empty lines.

    :param page_number: Mushaf page number (1..PAGE_COUNT)
    :param provider: TextProvider
    :return: Page
    """
    if not 1 <= page_number <= PAGE_COUNT:
        raise ValueError(f"Page number must be between 1 and {PAGE_COUNT}, got {page_number}")

    try:
        raw_text = await provider.load_page_text(page_number)
    except PageTextLoadError as e:
        _LOGGER.warning(f"{e}. Page {page_number} will be blank.")
        return blank_page(page_number)

    return build_page(page_number, raw_text)


async def assemble_pages(page_numbers, provider):
    """Load several pages concurrently, keeping the requested order."""
    return list(await asyncio.gather(*(assemble_page(n, provider) for n in page_numbers)))


def load_pages(page_numbers, provider):
    """Blocking wrapper around assemble_pages for synchronous callers."""
    return asyncio.run(assemble_pages(page_numbers, provider))
