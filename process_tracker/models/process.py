"""
Process Tracker
Process model — procurement process with phase and location timelines.

Records are persisted as plain JSON objects (camelCase keys). ``Process.from_dict``
is the single normalization step run when a record is read from the store:
missing timelines become empty lists, a missing location becomes ``None`` and
the legacy ``fase`` key is read as ``phase``. Unknown keys are kept in
``extra`` and written back untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Default label of the terminal phase reconciled by the contract-date repair
PHASE_CONTRACTED = "Contracted"

# Fields parsed to float before they are stored
MONETARY_FIELDS = ("value",)

# Keys owned by the model itself; everything else lands in Process.extra
CORE_KEYS = frozenset({
    "id", "phase", "fase", "location", "contractDate", "creationDate",
    "attachments", "history", "locationHistory", *MONETARY_FIELDS,
})


@dataclass
class Location:
    """Where a process currently sits: organizational sector + responsible party."""

    sector: str | None = None
    responsible: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Location:
        return cls(sector=data.get("sector"), responsible=data.get("responsible"))

    def to_dict(self) -> dict:
        return {"sector": self.sector, "responsible": self.responsible}


@dataclass
class HistoryEntry:
    """One interval of the phase timeline. ``end_date`` is None while open."""

    phase: str | None
    start_date: str | None
    end_date: str | None = None

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        return cls(
            phase=data.get("phase", data.get("fase")),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
        )

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass
class LocationEntry:
    """One interval of the location timeline. ``end_date`` is None while open."""

    sector: str | None
    responsible: str | None
    start_date: str | None
    end_date: str | None = None

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    @classmethod
    def from_dict(cls, data: dict) -> LocationEntry:
        return cls(
            sector=data.get("sector"),
            responsible=data.get("responsible"),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
        )

    def to_dict(self) -> dict:
        return {
            "sector": self.sector,
            "responsible": self.responsible,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass
class Attachment:
    """Reference to an uploaded file, as produced by the upload collaborator."""

    stored_filename: str
    original_filename: str
    storage_path: str

    @classmethod
    def from_dict(cls, data: dict) -> Attachment:
        return cls(
            stored_filename=data.get("filename", ""),
            original_filename=data.get("originalname", ""),
            storage_path=data.get("path", ""),
        )

    def to_dict(self) -> dict:
        return {
            "filename": self.stored_filename,
            "originalname": self.original_filename,
            "path": self.storage_path,
        }


@dataclass
class Process:
    """A procurement process and its two append-only timelines."""

    id: int
    phase: str | None = None
    location: Location | None = None
    value: float = 0.0
    contract_date: str | None = None
    creation_date: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    location_history: list[LocationEntry] = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    @property
    def label(self) -> str:
        """Human-facing identifier used in logs (process number if present)."""
        return str(self.extra.get("processNumber") or self.id)

    @classmethod
    def from_dict(cls, data: dict) -> Process:
        location = data.get("location")
        raw_value = data.get("value")
        return cls(
            id=data.get("id"),
            phase=data.get("phase", data.get("fase")),
            location=Location.from_dict(location) if isinstance(location, dict) else None,
            value=raw_value if isinstance(raw_value, (int, float)) else 0.0,
            contract_date=data.get("contractDate"),
            creation_date=data.get("creationDate"),
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
            history=[HistoryEntry.from_dict(h) for h in data.get("history") or []],
            location_history=[
                LocationEntry.from_dict(h) for h in data.get("locationHistory") or []
            ],
            extra={k: v for k, v in data.items() if k not in CORE_KEYS},
        )

    def to_dict(self) -> dict:
        body = dict(self.extra)
        body.update({
            "id": self.id,
            "phase": self.phase,
            "location": self.location.to_dict() if self.location else None,
            "value": self.value,
            "creationDate": self.creation_date,
            "attachments": [a.to_dict() for a in self.attachments],
            "history": [h.to_dict() for h in self.history],
            "locationHistory": [h.to_dict() for h in self.location_history],
        })
        if self.contract_date is not None:
            body["contractDate"] = self.contract_date
        return body
