"""Default catalog: a general-purpose selection of File Exchange entries.

Rows are (folder name, FEX identifier) or (folder name, FEX identifier,
"owner/repo") when the entry is mirrored on GitHub.
"""

from .catalog import Catalog
from .catalog import CatalogEntry

# Companion "current version" checker, installed on demand
CHECK_VERSION_ENTRY = CatalogEntry(name="checkVersion", identifier=39993)

DEFAULT_ROWS: list[tuple] = [
    ("bisection", 28150),
    ("blend", 56530),
    ("buildFEXlibrary", 54832, "sky-s/buildFexLibrary"),
    ("carpetplot", 52272),
    ("cch", 43264),
    ("cell2str", 13999),
    ("CopyPaste", 28016),
    ("cosspace", 28337),
    ("cprintf", 24093),
    ("cursorbar", 49612),
    ("dispdisp", 48637),
    ("disperse", 33866),
    ("explorestruct", 7828),
    ("export_fig", 23629, "altmany/export_fig"),
    ("ezyfit", 10176),
    ("fevaln", 53552),
    ("git", 29154),
    ("goto", 3145),
    ("hatchfill", 30733),
    ("is___", 61262),
    ("labelpoints", 46891),
    ("Link", 48638),
    ("linspace3", 28553),
    ("lyt", 44040),
    ("mcd", 44043),
    ("mkxlsfunc", 40404),
    ("plotm", 62962),
    ("polygeom", 319),
    ("progressbar", 6922),
    ("randraw", 7309),
    ("randt", 61261),
    ("regexpBuilder", 41899),
    ("scl", 56624),
    ("search_luckysearch", 41357),
    ("showorigin", 61632),
    ("simps", 25754),
    ("sinspace", 28358),
    ("speedtester", 43250),
    ("styleguide", 40795),
    ("surfarea", 62992),
    ("tau", 48636),
    ("txtmenu", 28285),
    ("units", 38977),
    ("validatedinput", 53553),
    ("vgrid", 56529),
]


def default_catalog() -> Catalog:
    """Return the bundled default catalog."""
    return Catalog.from_rows(DEFAULT_ROWS)
