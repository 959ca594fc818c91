# tests/packswitch/mods/test_resolver.py
from packswitch.mods.catalog import DictCatalog
from packswitch.mods.resolver import computeClosure, missingFromCatalog


def test_closure_follows_chain():
    catalog = DictCatalog.fromMapping({"A": ["B"], "B": ["C"], "C": []})

    assert computeClosure({"A"}, catalog) == {"A", "B", "C"}


def test_closure_terminates_on_cycle():
    catalog = DictCatalog.fromMapping({"A": ["B"], "B": ["A"]})

    assert computeClosure({"A"}, catalog) == {"A", "B"}


def test_closure_keeps_unknown_mod_as_leaf():
    catalog = DictCatalog.fromMapping({"A": ["Ghost"], "B": []})

    # Ghost has no entry: included, but not expanded and no error
    assert computeClosure({"A"}, catalog) == {"A", "Ghost"}
    assert computeClosure({"Ghost"}, catalog) == {"Ghost"}


def test_closure_of_diamond_and_many_roots():
    catalog = DictCatalog.fromMapping({
        "Top": ["Left", "Right"],
        "Left": ["Core"],
        "Right": ["Core"],
        "Core": [],
        "Other": [],
    })

    assert computeClosure({"Top"}, catalog) == {"Top", "Left", "Right", "Core"}
    assert computeClosure(["Top", "Other"], catalog) == {"Top", "Left", "Right", "Core", "Other"}
    assert computeClosure(set(), catalog) == set()


def test_closure_handles_deep_chains_without_recursion():
    depth = 5000
    graph = {f"m{i}": [f"m{i + 1}"] for i in range(depth)}
    graph[f"m{depth}"] = []
    catalog = DictCatalog.fromMapping(graph)

    assert len(computeClosure({"m0"}, catalog)) == depth + 1


def test_missing_from_catalog_lists_unknown_names():
    catalog = DictCatalog.fromMapping({"A": []})

    assert missingFromCatalog(["A", "Ghost", "Alien", "Ghost"], catalog) == ["Alien", "Ghost"]
