from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """SI unit name plus the factor that rescales a value into it."""

    unit_name: str
    factor: float


DEGRADED = ConversionResult("", 1.0)

# (name, symbol, SI unit, factor)
BASE_UNITS: Tuple[Tuple[str, str, str, float], ...] = (
    ("minute", "min", "s", 60.0),
    ("hour", "h", "s", 3600.0),
    ("day", "d", "s", 86400.0),
    ("degree", "°", "rad", 0.0174532925199433),
    ("arcminute", "'", "rad", 0.0002908882086657),
    ("arcsecond", '"', "rad", 0.0000048481368111),
    ("hectare", "ha", "m²", 10000.0),
    ("litre", "L", "m³", 0.001),
    ("tonne", "t", "kg", 1000.0),
)


class BaseUnitRegistry:
    """Token to SI conversion table, built once on first lookup."""

    def __init__(self, units: Tuple[Tuple[str, str, str, float], ...] = BASE_UNITS) -> None:
        self._units = units
        self._lock = threading.Lock()
        self._table: Mapping[str, ConversionResult] | None = None
        self.builds = 0

    def _build(self) -> Mapping[str, ConversionResult]:
        table: Dict[str, ConversionResult] = {}
        for name, symbol, si_unit, factor in self._units:
            conversion = ConversionResult(si_unit, factor)
            table[name] = conversion
            table[symbol] = conversion
            table[si_unit] = ConversionResult(si_unit, 1.0)
        self.builds += 1
        logger.info("unit_registry_built", entries=len(table))
        return MappingProxyType(table)

    @property
    def table(self) -> Mapping[str, ConversionResult]:
        table = self._table
        if table is not None:
            return table
        with self._lock:
            if self._table is None:
                self._table = self._build()
            return self._table

    def lookup(self, token: str) -> ConversionResult:
        conversion = self.table.get(token)
        if conversion is None:
            logger.debug("unit_unknown", token=token)
            return DEGRADED
        return conversion


_REGISTRY = BaseUnitRegistry()


def lookup(token: str) -> ConversionResult:
    return _REGISTRY.lookup(token)


def list_units() -> Dict[str, Dict[str, Any]]:
    return {
        name: {
            "symbol": symbol,
            "si_unit": si_unit,
            "factor": factor,
        }
        for name, symbol, si_unit, factor in BASE_UNITS
    }


def si_units() -> List[str]:
    seen: List[str] = []
    for _, _, si_unit, _ in BASE_UNITS:
        if si_unit not in seen:
            seen.append(si_unit)
    return seen
