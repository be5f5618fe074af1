"""Smoke test of the top-level API as shown in the package docstring."""

import gasnet
from gasnet import EntityStore, analysis, connect


def test_docstring_example():
    store = EntityStore()
    a = store.add_station("A", 4, 4, 1)
    b = store.add_station("B", 2, 1, 2)
    connect(store, a.ref, b.ref, 700, length=120.0)

    flow = analysis.max_flow(store, a.ref, b.ref)
    route = analysis.shortest(store, a.ref, b.ref)

    assert flow.total_flow > 0
    assert route.cost == 120.0
    assert gasnet.__version__ == "0.1.0"
