"""Internet-shortcut bookmark files pointing back at the catalog page."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def shortcut_path(install_dir: Path, name: str) -> Path:
    """Path of the bookmark file for an entry, e.g. ``_export_fig on FEX.url``."""
    return install_dir / f"_{name} on FEX.url"


def write_shortcut(install_dir: Path, name: str, page_url: str) -> Path:
    """
    Write (or overwrite) the bookmark file for an entry.

    Args:
        install_dir: Entry's installation directory
        name: Catalog entry name
        page_url: Catalog page URL

    Returns:
        Path to the written .url file
    """
    path = shortcut_path(install_dir, name)
    path.write_text(f"[InternetShortcut]\nURL={page_url}", encoding="utf-8")
    logger.debug(f"Wrote shortcut {path}")
    return path


def has_content(directory: Path) -> bool:
    """True if directory holds anything besides bookmark files."""
    return any(not item.name.endswith(".url") for item in directory.iterdir())
