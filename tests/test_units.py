"""Tests for the base unit registry."""

import threading
import time

import pytest

from modules.unitconvert.core.units import (
    BASE_UNITS,
    DEGRADED,
    BaseUnitRegistry,
    ConversionResult,
    list_units,
    lookup,
    si_units,
)


class TestLookup:

    @pytest.mark.parametrize("si_unit", ["s", "rad", "m²", "m³", "kg"])
    def test_si_unit_maps_to_itself(self, si_unit):
        assert lookup(si_unit) == ConversionResult(si_unit, 1.0)

    @pytest.mark.parametrize("name,symbol,si_unit,factor", BASE_UNITS)
    def test_name_and_symbol_share_conversion(self, name, symbol, si_unit, factor):
        expected = ConversionResult(si_unit, factor)
        assert lookup(name) == expected
        assert lookup(symbol) == expected

    def test_symbols_with_quotes_and_degree_sign(self):
        assert lookup("°") == ConversionResult("rad", 0.0174532925199433)
        assert lookup("'") == ConversionResult("rad", 0.0002908882086657)
        assert lookup('"') == ConversionResult("rad", 0.0000048481368111)

    @pytest.mark.parametrize("token", ["foo", "", "Tonne", "minutes", "degrees"])
    def test_unknown_token_degrades(self, token):
        assert lookup(token) == DEGRADED
        assert lookup(token) == ConversionResult("", 1.0)

    def test_result_is_immutable(self):
        result = lookup("tonne")
        with pytest.raises(AttributeError):
            result.factor = 1.0


class TestRegistryBuild:

    def test_builds_lazily_once(self):
        registry = BaseUnitRegistry()
        assert registry.builds == 0
        registry.lookup("hour")
        registry.lookup("day")
        registry.lookup("nothing")
        assert registry.builds == 1

    def test_table_is_read_only(self):
        registry = BaseUnitRegistry()
        with pytest.raises(TypeError):
            registry.table["furlong"] = ConversionResult("m", 201.168)

    def test_table_contents(self):
        table = BaseUnitRegistry().table
        # nine name/symbol pairs plus five SI self entries
        assert len(table) == 9 * 2 + 5

    def test_concurrent_first_lookups_build_once(self):
        workers = 16
        barrier = threading.Barrier(workers)

        class SlowRegistry(BaseUnitRegistry):
            def _build(self):
                table = super()._build()
                time.sleep(0.05)
                return table

        registry = SlowRegistry()
        tables = []
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            result = registry.lookup("tonne")
            with lock:
                tables.append(registry.table)
                results.append(result)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.builds == 1
        assert len(tables) == workers
        assert all(table is tables[0] for table in tables)
        assert len(tables[0]) == 23
        assert results == [ConversionResult("kg", 1000.0)] * workers


class TestListing:

    def test_list_units(self):
        units = list_units()
        assert set(units) == {row[0] for row in BASE_UNITS}
        assert units["litre"] == {"symbol": "L", "si_unit": "m³", "factor": 0.001}

    def test_si_units_in_table_order(self):
        assert si_units() == ["s", "rad", "m²", "m³", "kg"]
