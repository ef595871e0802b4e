import pytest

from valve_lookup.joiner import join_valve_data


VALVE_TABLE = [
    ["Valve", "Location", "Location Notes", "Function"],
    ["V1", "North Gate", "behind mailbox", "Isolation"],
    ["V2", "North Gate", "", "Isolation"],
    ["V3", "Clubhouse", "under lid", "Main"],
    ["V4", "Pool Road", "", "Isolation"],
    ["V5", "Ridge Drive", "", "Flush"],
]

# Z1 <- V1, V2        lots 101, 102
# Z2 <- V2, V3, V4    lots 201, 202
# Z3 <- V5            lot 301, shares lot 202 with Z2 via V5
ZONE_TABLE = [
    ["Valve", "Zone", "Lot #"],
    ["V1", "Z1", "101"],
    ["V2", "Z1", "102"],
    ["V2", "Z2", "201"],
    ["V3", "Z2", "201"],
    ["V4", "Z2", "202"],
    ["V5", "Z3", "301"],
    ["V5", "Z3", "202"],
]


class FakeTableSource:
    """fetch_table stand-in; set `fail` to make every fetch raise."""

    def __init__(self, tables=None):
        self.tables = dict(tables or {"Valve Sheet": VALVE_TABLE, "Zone Sheet": ZONE_TABLE})
        self.fail = False
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        if self.fail:
            raise ConnectionError("sheet service unavailable")
        return self.tables[name]


class FakeClock:
    def __init__(self, now_ms=1_000_000):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms):
        self.now_ms += ms


@pytest.fixture
def graph():
    return join_valve_data(VALVE_TABLE, ZONE_TABLE)


@pytest.fixture
def valves(graph):
    return graph.valves


@pytest.fixture
def source():
    return FakeTableSource()


@pytest.fixture
def clock():
    return FakeClock()
