"""
records/models.py -- Domain dataclass for the records collection.

Pure data container with zero logic. Querying, sorting and pagination live
in records/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Record:
    """A user-managed title/description entry.

    Records have no owner: any authenticated caller may read or write any
    record. id is None before the record is written to the database.
    """

    title: str
    description: str
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, set by store on every write
