"""Generic in-memory repository."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, Mapping, Optional, Type, TypeVar

from distribution_service.logging import logger
from distribution_service.models import Record, RecordId, Snapshot

if TYPE_CHECKING:
    from distribution_service.repositories.store import EntityStore

T = TypeVar("T", bound=Record)


@dataclass(frozen=True)
class Embed:
    """Foreign key whose target is copied into the owner on create."""

    ref_field: str
    collection: str
    snapshot_field: str


def same_id(left: Any, right: Any) -> bool:
    """Identifiers match across int/str spellings ("1" == 1)."""
    if left is None or right is None:
        return False
    return left == right or str(left) == str(right)


def _normalize(value: Any) -> str:
    return str(value).strip().lower()


def _allowed_values(value: Any) -> set[str]:
    if isinstance(value, (list, tuple, set)):
        return {_normalize(v) for v in value}
    return {_normalize(v) for v in str(value).split(",") if v.strip()}


class Repository(Generic[T]):
    """Ordered collection of one entity type plus its identifier allocator.

    Mutations notify the owning store, which writes the whole graph.
    """

    # fields whose change in an update re-runs ``prepare``
    derived_from: tuple[str, ...] = ()

    def __init__(
        self,
        name: str,
        model: Type[T],
        *,
        string_ids: bool = False,
        embeds: Iterable[Embed] = (),
        filter_fields: Iterable[str] = (),
        search_fields: Iterable[str] = (),
        unique_fields: Iterable[str] = (),
        date_field: Optional[str] = None,
        number_field: Optional[str] = None,
        number_format: Optional[str] = None,
        newest_first: bool = False,
        defaults: Optional[Callable[[], dict[str, Any]]] = None,
    ) -> None:
        self.name = name
        self.model = model
        self.string_ids = string_ids
        self.embeds = tuple(embeds)
        self.filter_fields = tuple(filter_fields)
        self.search_fields = tuple(search_fields)
        self.unique_fields = tuple(unique_fields)
        self.date_field = date_field
        self.number_field = number_field
        self.number_format = number_format
        self.newest_first = newest_first
        self._defaults = defaults
        self.records: list[T] = []
        self.next_id = 1
        self._store: Optional["EntityStore"] = None

    def bind(self, store: "EntityStore") -> None:
        self._store = store

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    # Reads

    def get(self, record_id: RecordId) -> Optional[T]:
        for record in self.records:
            if same_id(record.id, record_id):
                return record
        return None

    def list(self, filters: Optional[Mapping[str, Any]] = None) -> list[T]:
        """Return records narrowed by the filters this collection understands."""
        filters = filters or {}
        result = list(self.records)

        for field in self.filter_fields:
            value = filters.get(field)
            if value is None or value == "":
                continue
            allowed = _allowed_values(value)
            result = [r for r in result if _normalize(getattr(r, field, None)) in allowed]

        search = filters.get("search")
        if search and self.search_fields:
            needle = str(search).lower()
            result = [
                r for r in result
                if any(needle in str(getattr(r, f, "") or "").lower() for f in self.search_fields)
            ]

        if self.date_field:
            start = filters.get("start_date")
            end = filters.get("end_date")
            if start:
                result = [r for r in result if self._date_of(r) >= str(start)[:10]]
            if end:
                result = [r for r in result if self._date_of(r) <= str(end)[:10]]

        return result

    # Writes

    def create(self, fields: Optional[Mapping[str, Any]] = None) -> T:
        data: dict[str, Any] = dict(self._defaults() if self._defaults else {})
        data.update(fields or {})
        data.pop("id", None)
        new_id = self.next_id
        self.check(data, new_id)

        data["id"] = str(new_id) if self.string_ids else new_id
        if self.number_field and not data.get(self.number_field):
            data[self.number_field] = self.number_format.format(id=new_id, year=date.today().year)

        self._embed(data)
        record = self.model.model_validate(self.prepare(data))
        # the id is only spent once the record is valid
        self.next_id = new_id + 1
        if self.newest_first:
            self.records.insert(0, record)
        else:
            self.records.append(record)

        logger.debug("Record created", collection=self.name, record_id=record.id)
        self._changed()
        return record

    def update(self, record_id: RecordId, partial: Optional[Mapping[str, Any]] = None) -> Optional[T]:
        """Shallow-merge ``partial`` over the stored record; ``None`` when absent."""
        for index, record in enumerate(self.records):
            if same_id(record.id, record_id):
                break
        else:
            return None

        merged = record.model_dump()
        changes = {k: v for k, v in (partial or {}).items() if k != "id"}
        merged.update(changes)
        self.check(merged, record.id)
        if any(field in changes for field in self.derived_from):
            merged = self.prepare(merged)
        updated = self.model.model_validate(merged)
        self.records[index] = updated
        self._changed()
        return updated

    def remove(self, record_id: RecordId) -> bool:
        # no cascade: dependants keep dangling references
        for index, record in enumerate(self.records):
            if same_id(record.id, record_id):
                del self.records[index]
                self._changed()
                return True
        return False

    def prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        """Hook for collection-specific derivation before validation."""
        return data

    def check(self, data: Mapping[str, Any], record_id: RecordId) -> None:
        """Reject ``data`` for record ``record_id`` with ``ValueError``; nothing is stored on failure."""
        for field in self.unique_fields:
            value = data.get(field)
            if value is None or value == "":
                continue
            for other in self.records:
                if not same_id(other.id, record_id) and _normalize(getattr(other, field, "")) == _normalize(value):
                    raise ValueError(f"{field} {value!r} already exists")

    # Snapshot helpers

    def export(self) -> dict[str, Any]:
        return {
            "records": [record.model_dump(mode="json") for record in self.records],
            "next_id": self.next_id,
        }

    def load(self, records: Iterable[Mapping[str, Any]], next_id: Optional[int] = None) -> None:
        self.records = [self.model.model_validate(dict(item)) for item in records]
        highest = max((self._numeric(r.id) for r in self.records), default=0)
        self.next_id = max(next_id or 1, highest + 1)

    # Internals

    def _embed(self, data: dict[str, Any]) -> None:
        if self._store is None:
            return
        for embed in self.embeds:
            ref = data.get(embed.ref_field)
            if ref is None or ref == "":
                data[embed.ref_field] = None
                continue
            target = self._store.repository(embed.collection).get(ref)
            data[embed.snapshot_field] = Snapshot.capture(target, exclude={"password"}) if target else None

    def _snapshot_of(self, collection: str, record_id: Any) -> Optional[Snapshot]:
        if self._store is None or record_id in (None, ""):
            return None
        target = self._store.repository(collection).get(record_id)
        return Snapshot.capture(target) if target else None

    def _lookup(self, collection: str, record_id: Any) -> Optional[Record]:
        if self._store is None or record_id in (None, ""):
            return None
        return self._store.repository(collection).get(record_id)

    def _changed(self) -> None:
        if self._store is not None:
            self._store.persist()

    def _date_of(self, record: T) -> str:
        return str(getattr(record, self.date_field, "") or "")[:10]

    @staticmethod
    def _numeric(record_id: RecordId) -> int:
        try:
            return int(record_id)
        except (TypeError, ValueError):
            return 0
