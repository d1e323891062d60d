from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Row = Dict[str, Any]


class RecordStore(ABC):
    """
    Abstract data-access layer over the dashboard tables.

    Lookups return every matching row. ``exclude_id`` drops the row with
    that primary key, which is how edit flows avoid matching themselves.
    Backend failures must surface as ``StoreError``.
    """

    @abstractmethod
    def find_equal(
        self, table: str, field: str, value: Any, *, exclude_id: Optional[str] = None
    ) -> List[Row]:
        """Rows where ``field`` equals ``value``."""
        raise NotImplementedError

    @abstractmethod
    def find_containing(
        self, table: str, field: str, value: Any, *, exclude_id: Optional[str] = None
    ) -> List[Row]:
        """Rows whose array ``field`` contains ``value``."""
        raise NotImplementedError

    @abstractmethod
    def find_text(
        self, table: str, field: str, needle: str, *, exclude_id: Optional[str] = None
    ) -> List[Row]:
        """Rows whose text ``field`` contains ``needle``, case-insensitive."""
        raise NotImplementedError

    @abstractmethod
    def get(self, table: str, record_id: str) -> Optional[Row]:
        raise NotImplementedError

    @abstractmethod
    def list(self, table: str) -> List[Row]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        raise NotImplementedError

    @abstractmethod
    def update(self, table: str, record_id: str, changes: Row) -> Row:
        raise NotImplementedError

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        raise NotImplementedError
