# catalog.py
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(os.environ.get("CATALOG_DIR", Path(__file__).parent / "data"))
MOULDING_FILE = "moulding.csv"
SUPPLY_FILE = "supply.csv"

# F101 is sold as 8694 under another name
SKU_ALIASES = {"F101": "8694"}


@dataclass(frozen=True)
class MouldingRecord:
    sku: str
    width: float
    join_cost: float
    supplier: str = ""
    description: str = ""


@dataclass(frozen=True)
class SupplyRecord:
    sku: str
    name: str
    price: float


class CatalogIndex:
    """Read-only SKU lookup for mouldings and supplies."""

    def __init__(self, mouldings: Iterable[MouldingRecord] = (), supplies: Iterable[SupplyRecord] = ()):
        moulding_map: Dict[str, MouldingRecord] = {m.sku: m for m in mouldings}
        supply_map: Dict[str, SupplyRecord] = {s.sku: s for s in supplies}

        for alias, target in SKU_ALIASES.items():
            if target in moulding_map and alias not in moulding_map:
                src = moulding_map[target]
                moulding_map[alias] = MouldingRecord(alias, src.width, src.join_cost, src.supplier, src.description)

        self._mouldings: Mapping[str, MouldingRecord] = MappingProxyType(moulding_map)
        self._supplies: Mapping[str, SupplyRecord] = MappingProxyType(supply_map)

    def lookup_moulding(self, sku: Optional[str]) -> Optional[MouldingRecord]:
        if not sku:
            return None
        return self._mouldings.get(str(sku).strip())

    def lookup_supply(self, sku: Optional[str]) -> Optional[SupplyRecord]:
        if not sku:
            return None
        return self._supplies.get(str(sku).strip())

    def mouldings(self) -> List[MouldingRecord]:
        return list(self._mouldings.values())

    def supplies(self) -> List[SupplyRecord]:
        return list(self._supplies.values())

    def __len__(self) -> int:
        return len(self._mouldings) + len(self._supplies)


# ----------------------------
# CSV source
# ----------------------------
def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        logger.warning("Catalog file not found: %s", path)
        return pd.DataFrame()
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip().lower() for c in df.columns]
    return df


def _num(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").fillna(0.0)


def _text(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series([""] * len(df), index=df.index)
    return df[col].astype(str).str.strip()


def read_mouldings(path: Path) -> List[MouldingRecord]:
    df = _read_csv(path)
    if df.empty or "sku" not in df.columns:
        return []

    df["sku"] = _text(df, "sku")
    df = df[df["sku"] != ""]
    widths = _num(_text(df, "width"))
    join_costs = _num(_text(df, "join_cost"))
    suppliers = _text(df, "supplier")
    descriptions = _text(df, "description")

    return [
        MouldingRecord(sku, float(w), float(jc), sup, desc)
        for sku, w, jc, sup, desc in zip(df["sku"], widths, join_costs, suppliers, descriptions)
    ]


def read_supplies(path: Path) -> List[SupplyRecord]:
    df = _read_csv(path)
    if df.empty or "sku" not in df.columns:
        return []

    df["sku"] = _text(df, "sku")
    df = df[df["sku"] != ""]
    prices = _num(_text(df, "price"))
    names = _text(df, "name")

    return [SupplyRecord(sku, name, float(p)) for sku, name, p in zip(df["sku"], names, prices)]


def load_catalog(catalog_dir: Optional[Path] = None) -> CatalogIndex:
    catalog_dir = Path(catalog_dir or CATALOG_DIR)
    logger.info("Loading catalog from %s", catalog_dir)

    index = CatalogIndex(
        read_mouldings(catalog_dir / MOULDING_FILE),
        read_supplies(catalog_dir / SUPPLY_FILE),
    )
    logger.info("Loaded %d mouldings and %d supplies", len(index.mouldings()), len(index.supplies()))
    return index


# ----------------------------
# Process-wide index
# ----------------------------
_catalog: Optional[CatalogIndex] = None
_catalog_lock = threading.Lock()


def get_catalog() -> CatalogIndex:
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = load_catalog()
    return _catalog


def reset_catalog_cache() -> None:
    global _catalog
    with _catalog_lock:
        _catalog = None
