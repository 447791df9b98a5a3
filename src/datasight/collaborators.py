from __future__ import annotations

import asyncio
from dataclasses import fields, replace
from typing import Any, Dict, Mapping, Optional, Protocol

from .constants import DatasetStatus
from .models import DatasetRecord, User


class AuthBackend(Protocol):
    async def get_current_user(self) -> Optional[User]:
        ...


class DatasetStore(Protocol):
    async def get_dataset(self, dataset_id: str, owner_id: str) -> Optional[DatasetRecord]:
        ...

    async def update_dataset_status(self, dataset_id: str, fields: Mapping[str, Any]) -> None:
        ...

    async def try_mark_processing(self, dataset_id: str) -> bool:
        """Atomically move a dataset to ``processing`` unless it already is."""
        ...


class BlobStore(Protocol):
    async def download_file(self, path: str) -> bytes:
        ...


class StaticAuth:
    """Auth backend returning a fixed principal (or none)."""

    def __init__(self, user: Optional[User]) -> None:
        self.user = user

    async def get_current_user(self) -> Optional[User]:
        return self.user


_RECORD_FIELDS = {f.name for f in fields(DatasetRecord)}


class InMemoryDatasetStore:
    """Dataset store backed by a dict; status claims are serialized by a lock."""

    def __init__(self, records: Optional[Mapping[str, DatasetRecord]] = None) -> None:
        self._records: Dict[str, DatasetRecord] = dict(records or {})
        self._lock = asyncio.Lock()

    def add(self, record: DatasetRecord) -> None:
        self._records[record.id] = record

    def get(self, dataset_id: str) -> Optional[DatasetRecord]:
        return self._records.get(dataset_id)

    async def get_dataset(self, dataset_id: str, owner_id: str) -> Optional[DatasetRecord]:
        record = self._records.get(dataset_id)
        if record is None or record.user_id != owner_id:
            return None
        return replace(record)

    async def update_dataset_status(self, dataset_id: str, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - _RECORD_FIELDS
        if unknown:
            raise KeyError(f"Unknown dataset fields: {', '.join(sorted(unknown))}")
        async with self._lock:
            record = self._records.get(dataset_id)
            if record is None:
                raise KeyError(f"Dataset not found: {dataset_id}")
            self._records[dataset_id] = replace(record, **dict(fields))

    async def try_mark_processing(self, dataset_id: str) -> bool:
        async with self._lock:
            record = self._records.get(dataset_id)
            if record is None or record.insights_status == DatasetStatus.PROCESSING:
                return False
            self._records[dataset_id] = replace(record, insights_status=DatasetStatus.PROCESSING)
            return True


class InMemoryBlobStore:
    def __init__(self, files: Optional[Mapping[str, bytes]] = None) -> None:
        self._files: Dict[str, bytes] = dict(files or {})

    def put(self, path: str, content: bytes) -> None:
        self._files[path] = content

    async def download_file(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(f"Object not found: {path}") from None
