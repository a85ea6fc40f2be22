"""Server inventory: CSV rows turned into typed records."""

import csv
import logging
from dataclasses import dataclass, replace
from pathlib import Path

import click

logger = logging.getLogger(__name__)

HEADER = ("Name", "IP", "User", "Password", "Description", "Port")
DEFAULT_PORT = "22"
FIELDS = ("address", "user", "credential", "description", "port")


class InventoryError(click.ClickException):
    """Raised when the inventory path cannot be read or created."""


def valid_port(value: str) -> bool:
    return value.isdigit() and 0 < int(value) < 65536


@dataclass(frozen=True)
class Record:
    name: str
    address: str = ""
    user: str = ""
    credential: str = ""
    description: str = ""
    port: str = ""

    @classmethod
    def from_row(cls, row: list[str]) -> "Record":
        """Pad or cut *row* to six columns and build a Record from it."""
        cells = [c.strip() for c in row[: len(HEADER)]]
        cells += [""] * (len(HEADER) - len(cells))
        return cls(*cells)


def field(record: Record, name: str) -> str:
    """Return the attribute *name* of *record*.

    ``port`` falls back to 22 when the stored value is blank. Any other
    name outside FIELDS raises KeyError.
    """
    if name not in FIELDS:
        raise KeyError(name)
    value = getattr(record, name)
    if name == "port" and not value:
        return DEFAULT_PORT
    return value


def write_template(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.writer(f, lineterminator="\n").writerow(HEADER)


def load_inventory(path: str | Path) -> dict[str, Record] | None:
    """Return {name: Record} read from *path*.

    A missing file is replaced by a header-only template and None is
    returned so the caller can tell the operator where to fill it in.
    """
    path = Path(path)
    if path.exists() and not path.is_file():
        raise InventoryError(f"Inventory path is not a file: {path}")
    if not path.exists():
        write_template(path)
        logger.debug("Created inventory template at %s", path)
        return None

    records: dict[str, Record] = {}
    with open(path, newline="") as f:
        for lineno, row in enumerate(csv.reader(f), start=1):
            if not row or row[0].strip() == HEADER[0]:
                continue
            record = Record.from_row(row)
            if not record.name:
                logger.debug("Skipping line %d of %s: empty name", lineno, path)
                continue
            if record.port and not valid_port(record.port):
                logger.warning("Line %d of %s: invalid port '%s', using %s", lineno, path, record.port, DEFAULT_PORT)
                record = replace(record, port="")
            if record.name in records:
                logger.debug("Line %d of %s redefines '%s'", lineno, path, record.name)
            records[record.name] = record

    logger.debug("Loaded %d record(s) from %s", len(records), path)
    return records
