"""
Tests for valve / zone / lot search and the shutoff classification.
"""
from valve_lookup.joiner import join_valve_data
from valve_lookup.models import ShutoffReport, ValveRecord, ZoneStatus
from valve_lookup.search import classify_shutoff, search, search_many


def _ids(result):
    return [v.valve_id for v in result.valves]


class TestExactMatches:

    def test_valve_search_scopes_to_its_own_zones(self):
        # V1 serves Z3/Z4 and shares lot 500 with V9, which serves Z1
        valves = [
            ValveRecord("V1", zones=("Z3", "Z4"), lots=("500",)),
            ValveRecord("V9", zones=("Z1",), lots=("500",)),
        ]
        result = search("V1", valves)

        assert set(result.primary_zones) == {"Z3", "Z4"}
        assert _ids(result) == ["V1", "V9"]

        report = classify_shutoff(result, valves)
        assert "Z1" not in report.zones_in_scope
        assert set(report.zones_in_scope) == {"Z3", "Z4"}

    def test_valve_search_is_case_insensitive_and_exact(self, valves):
        assert search("v1", valves).matched_valve_ids == ("V1",)
        assert search("V", valves).matched_valve_ids == ()

    def test_related_valves_do_not_widen_scope(self, valves):
        result = search("V1", valves)
        # V2 joins through Z1, but its Z2 stays out of scope
        assert _ids(result) == ["V1", "V2"]
        assert result.primary_zones == ("Z1",)
        assert result.single_valve_lookup is True

    def test_zone_search_any_spelling(self, valves):
        for term in ("Z1", "z1", "Zone 1", "zone 1"):
            result = search(term, valves)
            assert result.zones == ("Z1",), term
            assert result.primary_zones == ("Z1",), term
            assert _ids(result) == ["V1", "V2"], term
            assert result.single_valve_lookup is False

    def test_zone_10_search_does_not_hit_zone_1(self, valves):
        result = search("Zone 10", valves)
        assert result.zones == ()
        assert result.valves == ()

    def test_lot_search(self, valves):
        result = search("202", valves)
        assert result.lots == ("202",)
        assert result.primary_zones == ()
        assert _ids(result) == ["V4", "V5"]

    def test_lot_search_is_case_insensitive(self):
        valves = [ValveRecord("V1", zones=("Z1",), lots=("A12",)), ValveRecord("V2", zones=("Z1",), lots=("A13",))]
        result = search("a12", valves)
        assert result.lots == ("A12",)
        # a lot match pulls in valves sharing the lot, not the zone
        assert _ids(result) == ["V1"]

    def test_free_text_adds_valves_without_scope(self, valves):
        result = search("isolation", valves)
        assert _ids(result) == ["V1", "V2", "V4"]
        assert result.zones == ()
        assert result.lots == ()
        assert result.primary_zones == ()

    def test_blank_term_returns_empty_result(self, valves):
        result = search("   ", valves)
        assert result.is_empty
        assert classify_shutoff(result, valves) == ShutoffReport()

    def test_result_valves_deduplicated_first_occurrence(self, valves):
        # V1 matches by id and by location
        result = search_many(["V1", "north"], valves)
        assert _ids(result) == ["V1", "V2"]

    def test_repeatable(self, valves):
        assert search("Z2", valves) == search("Z2", valves)


class TestShutoffClassification:

    def _two_valve_zone(self):
        graph = join_valve_data(
            [["Valve"], ["V1"], ["V2"]],
            [["Valve", "Zone", "Lot #"], ["V1", "Z1", "101"], ["V2", "Z1", "102"], ["V3", "Z9", "999"]],
        )
        return graph.valves

    def test_single_valve_never_shuts_off_zone(self):
        valves = self._two_valve_zone()
        result = search("V1", valves)
        report = classify_shutoff(result, valves)

        assert result.single_valve_lookup is True
        assert report.completely_shut_off == ()
        assert report.affected == ("Z1",)

    def test_both_valves_shut_off_zone(self):
        valves = self._two_valve_zone()
        result = search_many(["V1", "V2"], valves)
        report = classify_shutoff(result, valves)

        assert result.single_valve_lookup is False
        assert report.completely_shut_off == ("Z1",)
        assert report.affected == ()
        assert report.status_of("Z1") is ZoneStatus.SHUT_OFF

    def test_zone_search_end_to_end(self):
        valves = self._two_valve_zone()
        result = search("Z1", valves)
        report = classify_shutoff(result, valves)

        assert len(result.valves) == 2
        assert report.completely_shut_off == ("Z1",)
        assert set(report.affected_lots) == {"101", "102"}
        assert report.valves_by_zone == {"Z1": ("V1", "V2")}

    def test_partial_valve_set_is_affected(self):
        valves = [
            ValveRecord("V1", location="Ridge Drive", zones=("Z7",), lots=("701",)),
            ValveRecord("V2", location="Ridge Drive", zones=("Z7",), lots=("702",)),
            ValveRecord("V3", location="Clubhouse", zones=("Z7",), lots=("703",)),
        ]
        result = search("ridge", valves)
        report = classify_shutoff(result, valves)

        assert _ids(result) == ["V1", "V2"]
        assert report.zones_in_scope == ("Z7",)
        assert report.completely_shut_off == ()
        assert report.affected == ("Z7",)
        assert report.status_of("Z7") is ZoneStatus.AFFECTED

    def test_lot_scope_from_lot_lookup(self, valves):
        result = search("202", valves)
        report = classify_shutoff(result, valves, zones_for_lot=["Z2", "Z3"])

        assert report.zones_in_scope == ("Z2", "Z3")
        # Z2 still has V2 and V3 open; Z3 is fed by V5 alone
        assert report.affected == ("Z2",)
        assert report.completely_shut_off == ("Z3",)

    def test_lots_in_zone_removed_from_affected_lots(self, valves):
        result = search("Z1", valves)
        report = classify_shutoff(result, valves, lots_for_zone=["101", "102"])

        assert report.lots_in_zone == ("101", "102")
        assert report.affected_lots == ("201",)

    def test_zone_match_wins_over_lot_match(self):
        valves = [
            ValveRecord("V1", zones=("Z5",), lots=("5",)),
            ValveRecord("V2", zones=("Z5",), lots=("6",)),
            ValveRecord("V3", zones=("Z6",), lots=("5",)),
        ]
        result = search("5", valves)
        report = classify_shutoff(result, valves, zones_for_lot=["Z5", "Z6"])

        assert result.zones == ("Z5",)
        assert result.lots == ("5",)
        assert report.zones_in_scope == ("Z5",)
        assert report.completely_shut_off == ("Z5",)

    def test_scope_falls_back_to_result_zones(self, valves):
        result = search("clubhouse", valves)
        report = classify_shutoff(result, valves)

        assert _ids(result) == ["V3"]
        assert report.zones_in_scope == ("Z2",)
        assert report.affected == ("Z2",)

    def test_zone_spellings_are_one_zone(self):
        # V2 feeds the same zone, spelled differently, and stays open
        valves = [
            ValveRecord("V1", zones=("Z1",), lots=("101",)),
            ValveRecord("V2", zones=("Zone 1",), lots=("102",)),
            ValveRecord("V3", zones=("Z1",), lots=("103",)),
        ]
        result = search_many(["V1", "V3"], valves)
        report = classify_shutoff(result, valves)

        assert report.zones_in_scope == ("Z1",)
        assert report.completely_shut_off == ()
        assert report.affected == ("Z1",)
        assert report.valves_by_zone == {"Z1": ("V1", "V3")}

    def test_mixed_spellings_collapse_in_scope(self):
        valves = [
            ValveRecord("V1", zones=("Z1",), lots=("101",)),
            ValveRecord("V2", zones=("Zone 1",), lots=("102",)),
        ]
        result = search_many(["V1", "V2"], valves)
        report = classify_shutoff(result, valves)

        assert len(report.zones_in_scope) == 1
        assert report.completely_shut_off == report.zones_in_scope
        assert set(report.affected_lots) == {"101", "102"}
        assert set(report.valves_by_zone[report.zones_in_scope[0]]) == {"V1", "V2"}
