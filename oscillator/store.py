"""Saved-simulation records kept in a JSON file.

Adapter for the persistence boundary: a record holds the variant and the
external (camelCase) parameter mapping, so parameters round-trip through
the store unchanged. Records are kept newest first and capped at
MAX_RECORDS.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, NamedTuple

from simulation import SimulationVariant, params_from_dict, params_to_dict

logger = logging.getLogger(__name__)

MAX_RECORDS = 100

# Record field name -> JSON key
_JSON_KEYS = {
    "id": "id",
    "title": "title",
    "type": "type",
    "parameters": "parameters",
    "created_at": "createdAt",
    "description": "description",
    "time": "time",
    "updated_at": "updatedAt",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class StoreStats(NamedTuple):
    """Summary counts over the saved simulations."""

    total: int
    spring_count: int
    pendulum_count: int
    this_month: int


@dataclass(frozen=True)
class SimulationRecord:
    """One saved simulation.

    ``parameters`` is held as a read-only copy of the option mapping.
    """

    id: str
    title: str
    type: str
    parameters: Mapping
    created_at: str
    description: str = ""
    time: float = 0.0
    updated_at: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def to_json(self) -> dict:
        data = {_JSON_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}
        data["parameters"] = dict(self.parameters)
        return data

    @classmethod
    def from_json(cls, data: dict) -> SimulationRecord:
        kwargs = {}
        for name, key in _JSON_KEYS.items():
            if key in data:
                kwargs[name] = data[key]
        return cls(**kwargs)

    def restore_params(self):
        """Rebuild the validated parameter set stored in this record."""
        return params_from_dict(self.type, self.parameters)


class SimulationStore:
    """JSON-file-backed list of SimulationRecords.

    The file is read on construction and rewritten after every change.
    A missing file is an empty store.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._records: list[SimulationRecord] = []
        if self.path.exists():
            with open(self.path) as f:
                self._records = [SimulationRecord.from_json(d) for d in json.load(f)]
            logger.info("Loaded %d saved simulations from %s",
                        len(self._records), self.path)

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[SimulationRecord]:
        """All records, newest first."""
        return list(self._records)

    def get(self, record_id: str) -> SimulationRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise KeyError(f"Simulation not found: {record_id}")

    def save(self, title: str, params, description: str = "",
             time: float = 0.0) -> SimulationRecord:
        """Store *params* under *title* and return the new record."""
        title = title.strip()
        if not title:
            raise ValueError("title must not be empty")
        record = SimulationRecord(
            id=uuid.uuid4().hex,
            title=title,
            type=SimulationVariant(params.variant).value,
            parameters=params_to_dict(params),
            created_at=_now_iso(),
            description=description.strip(),
            time=float(time),
        )
        self._records = [record] + self._records[:MAX_RECORDS - 1]
        self._write()
        logger.info("Saved simulation %r (%s)", record.title, record.id)
        return record

    def save_session(self, title: str, session, description: str = "") -> SimulationRecord:
        return self.save(title, session.params, description, session.time)

    def update(self, record_id: str, title: str | None = None,
               description: str | None = None) -> SimulationRecord:
        """Edit the title and/or description of a record."""
        record = self.get(record_id)
        changes = {"updated_at": _now_iso()}
        if title is not None:
            changes["title"] = title.strip()
        if description is not None:
            changes["description"] = description.strip()
        updated = replace(record, **changes)
        self._records = [updated if r.id == record_id else r for r in self._records]
        self._write()
        return updated

    def delete(self, record_id: str) -> None:
        self.get(record_id)
        self._records = [r for r in self._records if r.id != record_id]
        self._write()
        logger.info("Deleted simulation %s", record_id)

    def export(self, record_id: str, directory: str | Path) -> Path:
        """Write a single record to its own JSON file; return the path."""
        record = self.get(record_id)
        directory = Path(directory)
        # path separators and dots collapse into "_": the file stays in *directory*
        safe_title = re.sub(r"[^\w-]+", "_", record.title)
        out = directory / f"shm_simulation_{safe_title}_{record.id}.json"
        directory.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            json.dump(record.to_json(), f, indent=2)
        logger.info("Exported simulation %s to %s", record.id, out)
        return out

    def stats(self, now: datetime | None = None) -> StoreStats:
        """Count records by variant and those created in the current month.

        *now* defaults to the current UTC time.
        """
        now = now or datetime.now(timezone.utc)
        this_month = 0
        for record in self._records:
            created = datetime.fromisoformat(record.created_at)
            if (created.year, created.month) == (now.year, now.month):
                this_month += 1
        return StoreStats(
            total=len(self._records),
            spring_count=sum(r.type == SimulationVariant.SPRING.value for r in self._records),
            pendulum_count=sum(r.type == SimulationVariant.PENDULUM.value for r in self._records),
            this_month=this_month,
        )

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump([r.to_json() for r in self._records], f, indent=2)
