import threading

import pytest

import catalog as catalog_mod
from catalog import CatalogIndex, MouldingRecord, load_catalog


@pytest.fixture
def catalog_dir(tmp_path):
    (tmp_path / "moulding.csv").write_text(
        "SKU,Width,Join_Cost,Supplier,Description\n"
        "8694,1.25,2.5634,Larson-Juhl,Black satin flat\n"
        ",1,1,,blank sku row\n"
        "7777,wide,,Roma,bad numbers\n",
        encoding="utf-8",
    )
    (tmp_path / "supply.csv").write_text(
        "sku,name,price\n"
        "B8501,Bright White mat,12.50\n"
        " B8522 ,Black core mat,14\n",
        encoding="utf-8",
    )
    return tmp_path


def test_load_catalog_from_csv(catalog_dir):
    index = load_catalog(catalog_dir)

    m = index.lookup_moulding("8694")
    assert m.width == pytest.approx(1.25)
    assert m.join_cost == pytest.approx(2.5634)
    assert m.supplier == "Larson-Juhl"

    bad = index.lookup_moulding("7777")
    assert bad.width == 0
    assert bad.join_cost == 0

    assert index.lookup_supply("B8522").price == pytest.approx(14.0)
    assert index.lookup_supply("B8501").name == "Bright White mat"


def test_blank_skus_are_skipped(catalog_dir):
    index = load_catalog(catalog_dir)
    assert sorted(m.sku for m in index.mouldings()) == ["7777", "8694", "F101"]


def test_missing_files_give_empty_catalog(tmp_path):
    index = load_catalog(tmp_path)
    assert len(index) == 0
    assert index.lookup_moulding("8694") is None


def test_lookup_misses_return_none():
    index = CatalogIndex()
    assert index.lookup_moulding("") is None
    assert index.lookup_moulding(None) is None
    assert index.lookup_supply("B8501") is None


def test_f101_alias_does_not_override_real_record():
    index = CatalogIndex(mouldings=[
        MouldingRecord("8694", 1.25, 2.5634),
        MouldingRecord("F101", 3.0, 9.99),
    ])
    assert index.lookup_moulding("F101").join_cost == pytest.approx(9.99)


def test_index_is_read_only():
    index = CatalogIndex(mouldings=[MouldingRecord("8694", 1.25, 2.5634)])
    with pytest.raises(TypeError):
        index._mouldings["X"] = MouldingRecord("X", 1, 1)


def test_get_catalog_loads_once(monkeypatch, catalog_dir):
    calls = []

    def fake_load(catalog_dir=None):
        calls.append(1)
        return CatalogIndex()

    catalog_mod.reset_catalog_cache()
    monkeypatch.setattr(catalog_mod, "load_catalog", fake_load)

    results = []
    threads = [threading.Thread(target=lambda: results.append(catalog_mod.get_catalog())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    catalog_mod.reset_catalog_cache()
