"""
Tests for the lookup service entry points.
"""
import pytest

from valve_lookup.config import LookupConfig
from valve_lookup.errors import DataSourceError
from valve_lookup.service import ValveLookupService


@pytest.fixture
def service(source, clock):
    return ValveLookupService(source, LookupConfig(), clock=clock)


class TestLookups:

    def test_get_all_valves(self, service, clock):
        res = service.get_all_valves()
        assert [v.valve_id for v in res.data] == ["V1", "V2", "V3", "V4", "V5"]
        assert res.updated_at == clock.now_ms
        assert res.stale is False

        rec = res.to_record()
        assert rec["count"] == 5
        assert rec["valves"][1]["zones"] == ["Z1", "Z2"]

    def test_get_valve_by_id(self, service):
        assert service.get_valve_by_id("V3").location == "Clubhouse"
        assert service.get_valve_by_id("v3").valve_id == "V3"
        assert service.get_valve_by_id("V99") is None

    def test_zones_for_lot(self, service):
        assert service.get_zones_for_lot("202") == ["Z2", "Z3"]
        assert service.get_zones_for_lot("999") == []

    def test_lots_for_zone(self, service):
        assert service.get_lots_for_zone("Z2") == ["201", "202"]
        assert service.get_lots_for_zone("zone 2") == ["201", "202"]
        assert service.get_lots_for_zone("Z20") == []

    @pytest.mark.parametrize("lot", ["101", "102", "201", "202", "301"])
    def test_lot_zone_round_trip(self, service, lot):
        zones = service.get_zones_for_lot(lot)
        assert zones
        for zone in zones:
            assert lot in service.get_lots_for_zone(zone)

    def test_orphan_rows_not_used_for_lookups(self, clock):
        from conftest import FakeTableSource

        source = FakeTableSource({
            "Valve Sheet": [["Valve"], ["V1"]],
            "Zone Sheet": [["Valve", "Zone", "Lot #"], ["V1", "Z1", "101"], ["V9", "Z1", "555"]],
        })
        service = ValveLookupService(source, clock=clock)
        assert service.get_lots_for_zone("Z1") == ["101"]
        assert service.get_zones_for_lot("555") == []


class TestSearch:

    def test_search(self, service):
        result = service.search("Zone 1")
        assert [v.valve_id for v in result.valves] == ["V1", "V2"]

    def test_shutoff_report_for_zone(self, service):
        result, report = service.shutoff_report(["Z1"])
        assert report.completely_shut_off == ("Z1",)
        assert report.lots_in_zone == ("101", "102")
        assert report.affected_lots == ("201",)

    def test_shutoff_report_for_lot(self, service):
        result, report = service.shutoff_report(["202"])
        assert result.lots == ("202",)
        assert report.zones_in_scope == ("Z2", "Z3")
        assert report.completely_shut_off == ("Z3",)
        assert report.affected == ("Z2",)

    def test_shutoff_report_for_valve_list(self, service):
        result, report = service.shutoff_report(["V2", "V3", "V4"])
        assert result.single_valve_lookup is False
        assert set(report.zones_in_scope) == {"Z1", "Z2"}
        # Z1 also needs V1, which joined as a related valve
        assert report.completely_shut_off == ("Z1", "Z2")

    def test_search_uses_cache(self, service, source):
        service.search("V1")
        service.search("V2")
        service.get_zones_for_lot("101")
        assert source.calls == ["Valve Sheet", "Zone Sheet"]


class TestFailures:

    def test_stale_flag_exposed(self, service, source, clock):
        first = service.get_all_valves()
        clock.advance(service.cfg.cache_ttl_ms + 1)
        source.fail = True

        res = service.get_all_valves()
        assert res.stale is True
        assert res.data == first.data
        assert service.search("V1").matched_valve_ids == ("V1",)

    def test_no_data_raises(self, service, source):
        source.fail = True
        with pytest.raises(DataSourceError):
            service.search("V1")
