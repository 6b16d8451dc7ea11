"""
Font Manager for Quranic Text

This module handles automatic detection, download, and registration of fonts
that carry the Arabic glyphs and marks used by Mushaf text.
"""

import os
import logging
import platform

import requests
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfbase import pdfmetrics

_LOGGER = logging.getLogger(__name__)

# Google Fonts with good Quranic text support (Open Source)
QURAN_FONTS = {
    "AmiriQuran": {
        "url": "https://github.com/google/fonts/raw/main/ofl/amiriquran/AmiriQuran-Regular.ttf",
        "filename": "AmiriQuran-Regular.ttf",
        "description": "Amiri variant tuned for Quranic text and marks",
    },
    "Amiri": {
        "url": "https://github.com/google/fonts/raw/main/ofl/amiri/Amiri-Regular.ttf",
        "filename": "Amiri-Regular.ttf",
        "description": "Traditional Naskh typeface with excellent support",
    },
    "Scheherazade": {
        "url": "https://github.com/google/fonts/raw/main/ofl/scheherazadenew/ScheherazadeNew-Regular.ttf",
        "filename": "ScheherazadeNew-Regular.ttf",
        "description": "Classical Arabic calligraphic style",
    },
}

DEFAULT_DOWNLOAD = "AmiriQuran"
REGISTERED_FONT_NAME = "QuranFont"

# System font locations by platform
SYSTEM_FONT_PATHS = {
    "windows": ["C:/Windows/Fonts", os.path.expandvars("%WINDIR%/Fonts")],
    "linux": ["/usr/share/fonts/truetype", "/usr/local/share/fonts", "~/.fonts", "~/.local/share/fonts"],
    "darwin": ["/Library/Fonts", "/System/Library/Fonts", "~/Library/Fonts"],  # macOS
}

# System fonts that support Quranic text, best first
SYSTEM_QURAN_FONTS = [
    "AmiriQuran-Regular.ttf",
    "Amiri-Regular.ttf",
    "ScheherazadeNew-Regular.ttf",
    "UthmanicHafs1Ver18.ttf",
    "trado.ttf",  # Traditional Arabic (Windows)
    "DejaVuSans.ttf",
]


def get_fonts_directory():
    """Directory for downloaded fonts, next to this module."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "fonts")


def _font_search_paths():
    """Existing font directories of the current platform."""
    system = platform.system().lower()
    if system not in SYSTEM_FONT_PATHS:
        _LOGGER.warning(f"No font directories known for platform '{system}'")
        return []
    expanded = (os.path.expanduser(p) for p in SYSTEM_FONT_PATHS[system])
    return [p for p in expanded if os.path.isdir(p)]


def find_system_quran_font():
    """
    Search the platform font directories for a Quran-capable font.

    Fonts are tried in SYSTEM_QURAN_FONTS order, directories recursively.

    :return: Path to font file or None if not found
    """
    search_paths = _font_search_paths()
    for filename in SYSTEM_QURAN_FONTS:
        for search_path in search_paths:
            for root, _, files in os.walk(search_path):
                if filename in files:
                    found = os.path.join(root, filename)
                    _LOGGER.info(f"Using system font {found}")
                    return found

    _LOGGER.warning("None of the known Quran fonts is installed")
    return None


def find_downloaded_quran_font(fonts_dir=None):
    """
    Look for a previously downloaded font in the fonts directory.

    :param fonts_dir: Directory to look in (default: ./fonts)
    :return: Path to font file or None if not found
    """
    fonts_dir = fonts_dir or get_fonts_directory()
    for font_info in QURAN_FONTS.values():
        local_path = os.path.join(fonts_dir, font_info["filename"])
        if os.path.exists(local_path):
            return local_path
    return None


def download_font(font_name=DEFAULT_DOWNLOAD, fonts_dir=None, timeout=30):
    """
    Fetch one of QURAN_FONTS into the fonts directory.

    An existing file is reused. A failed transfer leaves no partial file behind.

    :param font_name: Key of QURAN_FONTS
    :param fonts_dir: Target directory (default: ./fonts)
    :param timeout: Request timeout in seconds
    :return: Path of the font file or None if failed
    """
    font_info = QURAN_FONTS.get(font_name)
    if font_info is None:
        _LOGGER.error(f"Cannot download '{font_name}', choose one of {sorted(QURAN_FONTS)}")
        return None

    fonts_dir = fonts_dir or get_fonts_directory()
    os.makedirs(fonts_dir, exist_ok=True)
    target = os.path.join(fonts_dir, font_info["filename"])
    if os.path.exists(target):
        _LOGGER.debug(f"Reusing {target}")
        return target

    _LOGGER.info(f"Downloading {font_name} ({font_info['description']}) from {font_info['url']}")
    try:
        response = requests.get(font_info["url"], stream=True, timeout=timeout)
        response.raise_for_status()
        with open(target, "wb") as f_out:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f_out.write(chunk)
    except (requests.RequestException, OSError) as e:
        _LOGGER.error(f"Download of {font_name} failed: {e}")
        if os.path.exists(target):
            os.remove(target)
        return None

    _LOGGER.info(f"Saved {font_name} to {target}")
    return target


def register_font_file(font_path, font_name=REGISTERED_FONT_NAME):
    """
    Register a TrueType font file with ReportLab.

    :param font_path: Path to a .ttf file
    :param font_name: Name to register the font as
    :return: Registered font name or None if failed
    """
    if not os.path.isfile(font_path):
        _LOGGER.warning(f"No font file at {font_path}")
        return None
    try:
        pdfmetrics.registerFont(TTFont(font_name, font_path))
    except Exception as e:
        _LOGGER.error(f"ReportLab rejected {font_path}: {e}")
        return None
    _LOGGER.info(f"Registered '{font_name}' from {font_path}")
    return font_name


def register_quran_font(font_name=REGISTERED_FONT_NAME, allow_download=True):
    """
    Register a font suitable for Quranic text.

    Looks in ./fonts first, then the system font directories, and finally
    downloads DEFAULT_DOWNLOAD when allowed. A name registered earlier is
    returned as is.

    :param font_name: Name to register the font as in ReportLab
    :param allow_download: Allow the download step
    :return: Registered font name or None if failed
    """
    if font_name in pdfmetrics.getRegisteredFontNames():
        return font_name

    font_path = find_downloaded_quran_font() or find_system_quran_font()
    if font_path is None and allow_download:
        font_path = download_font(DEFAULT_DOWNLOAD)
    if font_path is None:
        _LOGGER.error("No Quran-capable font available")
        return None
    return register_font_file(font_path, font_name)


def get_quran_font(font_spec=None, allow_download=True):
    """
    Resolve the font used for page text.

    :param font_spec: Path to a .ttf file, a registered/built-in font name, or None for auto-detection
    :param allow_download: Allow downloading a font when none is found
    :return: Font name suitable for ReportLab
    """
    font_name = None
    if font_spec and font_spec.lower().endswith(".ttf"):
        font_name = register_font_file(font_spec)
    elif font_spec:
        try:
            pdfmetrics.getFont(font_spec)
            font_name = font_spec
        except KeyError:
            _LOGGER.warning(f"Font '{font_spec}' is neither registered nor a built-in font")
    else:
        font_name = register_quran_font(allow_download=allow_download)

    if font_name:
        return font_name

    # Helvetica has no Arabic glyphs, measuring Arabic fails and lines keep the base style
    _LOGGER.warning("Falling back to Helvetica, Arabic text will not render")
    return "Helvetica"


def list_available_quran_fonts():
    """Installed, downloaded and downloadable Quran fonts."""
    fonts_dir = get_fonts_directory()
    system_font = find_system_quran_font()
    return {
        "system_fonts": [system_font] if system_font else [],
        "downloaded_fonts": [
            name
            for name, info in QURAN_FONTS.items()
            if os.path.exists(os.path.join(fonts_dir, info["filename"]))
        ],
        "downloadable_fonts": list(QURAN_FONTS),
    }
