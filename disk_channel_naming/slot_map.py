"""Raw slot to administrator slot remapping"""

import logging
from typing import Dict, Iterable, Optional

from .errors import ConfigError

# Mapping name meaning "use the slot numbers Linux reports"
IDENTITY_MAPPING = "linux"


class SlotMap:
    """Two-column lookup table translating raw slots to mapped slots

    An identity map (no table) passes every raw slot through unchanged.
    """

    def __init__(self, table: Optional[Dict[int, int]] = None, source: str = IDENTITY_MAPPING):
        self._table = dict(table) if table is not None else None
        self.source = source

    @classmethod
    def identity(cls) -> "SlotMap":
        return cls()

    @classmethod
    def from_lines(cls, lines: Iterable[str], source: str = "<memory>",
                   logger: Optional[logging.Logger] = None) -> "SlotMap":
        """Build a table from mapping file lines

        Lines starting with '#' and blank lines are ignored. The first row for
        a raw slot wins.

        Raises:
            ConfigError: If a row does not hold two integer columns
        """
        logger = logger or logging.getLogger(__name__)
        table: Dict[int, int] = {}

        for lineno, line in enumerate(lines, 1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            columns = stripped.split()
            if len(columns) < 2:
                raise ConfigError(f"{source}:{lineno}: expected '<raw slot> <mapped slot>', got '{stripped}'")
            try:
                raw_slot, mapped_slot = int(columns[0]), int(columns[1])
            except ValueError:
                raise ConfigError(f"{source}:{lineno}: slot numbers must be integers, got '{stripped}'")

            if raw_slot in table:
                logger.debug(f"{source}:{lineno}: ignoring repeated entry for slot {raw_slot}")
                continue
            table[raw_slot] = mapped_slot

        return cls(table, source=source)

    @classmethod
    def load(cls, path: Optional[str], logger: Optional[logging.Logger] = None) -> "SlotMap":
        """Load a mapping file, or return the identity map for None / 'linux'

        Raises:
            ConfigError: If the file cannot be read
        """
        if path is None or path == IDENTITY_MAPPING:
            return cls.identity()

        logger = logger or logging.getLogger(__name__)
        logger.info(f"Loading slot mapping from {path}")
        try:
            with open(path, 'r') as f:
                return cls.from_lines(f.read().splitlines(), source=path, logger=logger)
        except OSError as e:
            raise ConfigError(f"Unable to read slot mapping file {path}: {e}")

    @property
    def is_identity(self) -> bool:
        return self._table is None

    def lookup(self, raw_slot: int) -> Optional[int]:
        """Return the mapped slot, or None when the table has no row for it"""
        if self._table is None:
            return raw_slot
        return self._table.get(raw_slot)

    def __len__(self) -> int:
        return len(self._table) if self._table is not None else 0

    def __repr__(self) -> str:
        return f"SlotMap(source={self.source!r}, entries={len(self)})"


def map_slot(raw_slot: int, slot_map: Optional[SlotMap] = None) -> Optional[int]:
    """Translate a raw slot through an optional slot map"""
    if slot_map is None:
        return raw_slot
    return slot_map.lookup(raw_slot)
