"""Install lock - Which version of each entry sits in the library.

One JSON file in the library root, keyed by entry name. build_library()
writes it after each fresh install; LockVersionChecker reads it to decide
whether an entry is still current.
"""

import json
import logging
from dataclasses import asdict
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from pathlib import Path

from .outcome import ResolutionOutcome

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


@dataclass
class InstallLockEntry:
    name: str
    identifier: int
    version: str | None
    source: str | None
    path: str
    installed_at: str


class InstallLock:
    """Install records for one library, persisted at lock_path."""

    def __init__(self, lock_path: Path):
        self.lock_path = lock_path
        self._entries: dict[str, InstallLockEntry] = self._read()

    def _read(self) -> dict[str, InstallLockEntry]:
        if not self.lock_path.exists():
            return {}
        try:
            data = json.loads(self.lock_path.read_text(encoding="utf-8"))
            return {name: InstallLockEntry(**raw) for name, raw in data["entries"].items()}
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Ignoring unreadable lock file {self.lock_path}: {e}")
            return {}

    def _write(self) -> None:
        data = {
            "version": FORMAT_VERSION,
            "entries": {name: asdict(entry) for name, entry in self._entries.items()},
        }
        try:
            self.lock_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save lock file {self.lock_path}: {e}")

    def record(self, outcome: ResolutionOutcome, install_dir: Path) -> InstallLockEntry:
        """Record a successful install, replacing any earlier record for the entry."""
        entry = InstallLockEntry(
            name=outcome.entry.name,
            identifier=outcome.entry.identifier,
            version=outcome.version,
            source=outcome.source_url,
            path=str(install_dir),
            installed_at=datetime.now(UTC).isoformat(),
        )
        self._entries[entry.name] = entry
        self._write()
        logger.debug(f"Recorded {entry.name} (version {entry.version}) in {self.lock_path}")
        return entry

    def get_entry(self, name: str) -> InstallLockEntry | None:
        return self._entries.get(name)
