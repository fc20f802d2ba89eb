"""
Histogram registry.

Named 1D/2D histograms booked up front and filled during event processing.
A registry belongs to one analysis instance; registries from parallel
workers are combined with merge() and written to ROOT with uproot.
"""
import logging
from typing import Iterator, Union

import hist
import numpy as np

from domain.config import AxisBinning
from domain.species import Species

AxisSpec = Union[AxisBinning, tuple]


def _regular_axis(spec: AxisSpec, name: str, label: str = "") -> hist.axis.Regular:
    binning = AxisBinning.from_value(spec)
    return hist.axis.Regular(binning.bins, binning.low, binning.high, name=name, label=label or name)


def species_key(prefix: str, species: Species) -> str:
    return f"{prefix}/{species.short_name}"


class HistogramRegistry:
    """Owns a set of named histograms under a common directory name."""

    def __init__(self, name: str):
        self.name = name
        self._histograms: dict[str, hist.Hist] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def add_1d(self, key: str, title: str, axis: AxisSpec) -> hist.Hist:
        histogram = hist.Hist(
            _regular_axis(axis, "x"),
            storage=hist.storage.Double(),
            name=key,
            label=title,
        )
        self._book(key, histogram)
        return histogram

    def add_2d(self, key: str, title: str, x_axis: AxisSpec, y_axis: AxisSpec) -> hist.Hist:
        histogram = hist.Hist(
            _regular_axis(x_axis, "x"),
            _regular_axis(y_axis, "y"),
            storage=hist.storage.Double(),
            name=key,
            label=title,
        )
        self._book(key, histogram)
        return histogram

    def add_species_2d(
        self,
        prefix: str,
        species: tuple[Species, ...],
        title: str,
        x_axis: AxisSpec,
        y_axis: AxisSpec
    ) -> None:
        """Book one 2D histogram per species under `prefix/<short name>`."""
        for sp in species:
            self.add_2d(species_key(prefix, sp), f"{title} {sp.info.label}", x_axis, y_axis)

    def _book(self, key: str, histogram: hist.Hist) -> None:
        if key in self._histograms:
            raise ValueError(f"Histogram '{key}' already booked in registry '{self.name}'")
        self._histograms[key] = histogram

    def fill(self, key: str, *values) -> None:
        self.get(key).fill(*values)

    def fill_species(self, prefix: str, species: Species, *values) -> None:
        self.fill(species_key(prefix, species), *values)

    def get(self, key: str) -> hist.Hist:
        try:
            return self._histograms[key]
        except KeyError:
            raise KeyError(f"Histogram '{key}' not booked in registry '{self.name}'") from None

    def __contains__(self, key: str) -> bool:
        return key in self._histograms

    def __len__(self) -> int:
        return len(self._histograms)

    def keys(self) -> list[str]:
        return list(self._histograms)

    def items(self) -> Iterator[tuple[str, hist.Hist]]:
        return iter(self._histograms.items())

    def entries(self, key: str) -> float:
        """Total fills of a histogram, flow bins included."""
        return float(self.get(key).sum(flow=True))

    def values(self, key: str) -> np.ndarray:
        return self.get(key).values()

    def merge(self, other: 'HistogramRegistry') -> 'HistogramRegistry':
        """Add the contents of another registry with the same bookings."""
        for key, histogram in other.items():
            if key not in self._histograms:
                self._histograms[key] = histogram.copy()
                continue
            self._histograms[key] = self._histograms[key] + histogram
        return self

    def write(self, root_file) -> None:
        """Write all histograms into `root_file` under a directory named after the registry."""
        for key, histogram in self._histograms.items():
            root_file[f"{self.name}/{key}"] = histogram
        self.logger.info(f"Wrote {len(self._histograms)} histograms to {self.name}/")
