import pytest

from catalog import CatalogIndex, MouldingRecord, SupplyRecord
from pricing_config import default_config
from pricing_engine import OrderSpecification


@pytest.fixture
def catalog():
    return CatalogIndex(
        mouldings=[
            MouldingRecord("8694", 1.25, 2.5634, "Larson-Juhl", "Black satin flat"),
            MouldingRecord("5102", 2.0, 4.10),
        ],
        supplies=[
            SupplyRecord("B8501", "Bright White mat", 12.50),
            SupplyRecord("B8522", "Black core mat", 14.00),
        ],
    )


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def bare_order():
    """20 x 60 on 8694, nothing else."""
    return OrderSpecification(
        width=20,
        height=60,
        frame_sku="8694",
        acrylic_type="None",
        backing_type="None",
    )
