"""
Record sinks.

Accepted candidates are handed to a sink as they are produced. ListSink keeps
them in memory; RootTreeSink additionally turns them into flat columns and
writes them as a TTree with uproot.
"""
import logging
from typing import Protocol, Union

import numpy as np

from domain.records import DerivedRecord, GeneratedRecord

Record = Union[DerivedRecord, GeneratedRecord]


class RecordSink(Protocol):
    def write(self, record: Record) -> None:
        ...

    def extend(self, other: 'RecordSink') -> None:
        """Append every record held by `other`; used when merging analyses."""
        ...


class ListSink:
    """Collects records in memory."""

    def __init__(self):
        self.records: list[Record] = []

    def write(self, record: Record) -> None:
        self.records.append(record)

    def extend(self, other: 'ListSink') -> None:
        self.records.extend(other.records)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


class RootTreeSink(ListSink):
    """In-memory sink that can be dumped as a flat TTree."""

    def __init__(self, tree_name: str):
        super().__init__()
        self.tree_name = tree_name
        self.logger = logging.getLogger(self.__class__.__name__)

    def to_arrays(self) -> dict[str, np.ndarray]:
        """
        Column-oriented view of the buffered records.

        Scalars become 1D float arrays; per-track lists become (n, 4) arrays.
        """
        if not self.records:
            return {}
        rows = [record.to_row() for record in self.records]
        return {
            column: np.asarray([row[column] for row in rows], dtype=np.float64)
            for column in rows[0]
        }

    def write_to(self, root_file) -> int:
        """Write the buffered records into `root_file`; returns the number written."""
        arrays = self.to_arrays()
        if not arrays:
            self.logger.info(f"No records for tree '{self.tree_name}', skipping")
            return 0
        root_file[self.tree_name] = arrays
        self.logger.info(f"Wrote {len(self.records)} records to tree '{self.tree_name}'")
        return len(self.records)
