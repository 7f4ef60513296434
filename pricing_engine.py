# pricing_engine.py
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import tuning_knobs as knobs
from catalog import CatalogIndex
from measurement import parse_currency, parse_measurement
from pricing_config import PricingConfig

logger = logging.getLogger(__name__)

Number = Union[str, int, float, None]

_REMOTE_RE = re.compile(
    r"\b(" + "|".join(re.escape(r) for r in knobs.REMOTE_REGIONS) + r")\b",
    re.IGNORECASE,
)
_TAXABLE_RE = re.compile(r"\b" + re.escape(knobs.TAXABLE_REGION) + r"\b", re.IGNORECASE)

# floor() guard for depths like 4.5 / 1.5
_DEPTH_EPS = 1e-9


@dataclass(frozen=True)
class OrderSpecification:
    width: Number = 0
    height: Number = 0
    quantity: Number = 1
    frame_sku: Optional[str] = ""
    chop_only: bool = False

    # mats
    mat_border_all: Number = ""
    mat_border_left: Number = ""
    mat_border_right: Number = ""
    mat_border_top: Number = ""
    mat_border_bottom: Number = ""
    mat1_sku: Optional[str] = ""
    mat1_reveal: Number = ""
    mat2_sku: Optional[str] = ""
    mat2_reveal: Number = ""
    mat3_sku: Optional[str] = ""
    extra_mat_openings: Number = 0

    # materials
    acrylic_type: Optional[str] = "Standard"
    backing_type: Optional[str] = "White Foam"

    # print options
    print_paper: bool = False
    print_paper_type: str = ""
    dry_mount: bool = False
    print_canvas: bool = False
    print_canvas_wrap_style: str = ""

    # fixed-fee options
    engraved_plaque: bool = False
    engraved_plaque_size: str = ""
    leds: bool = False
    shadowbox_fitting: bool = False
    additional_labor: bool = False

    # deep shadowbox
    stacker_frame: bool = False
    shadow_depth: Number = 0

    # delivery + money
    delivery_method: str = "shipping"
    city_state_zip: str = ""
    discount: str = ""
    deposit: Number = ""


@dataclass(frozen=True)
class Dimensions:
    outer_width: float
    outer_height: float
    united_inches: float
    square_inches: float


@dataclass(frozen=True)
class StackerLayer:
    sku: str
    depth: float
    count: int
    cost: float


@dataclass(frozen=True)
class FrameCost:
    strategy: str  # "standard" | "stacker"
    cost: float
    join_feet: Optional[float] = None
    layers: List[StackerLayer] = field(default_factory=list)
    uncovered_depth: float = 0.0


def _money(x: float) -> str:
    # avoid "-0.00"
    if round(x, 2) == 0:
        return "0.00"
    return f"{x:.2f}"


def _sku(raw: Optional[str]) -> str:
    return str(raw).strip() if raw is not None else ""


def _has_sku(raw: Optional[str]) -> bool:
    return _sku(raw) not in knobs.NO_FRAME_SKUS


def _quantity(raw: Number) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 1
    return max(0, int(parse_measurement(raw)))


# ----------------------------
# Geometry
# ----------------------------
def compute_dimensions(spec: OrderSpecification) -> Dimensions:
    width = parse_measurement(spec.width)
    height = parse_measurement(spec.height)
    border_all = parse_measurement(spec.mat_border_all)
    left = parse_measurement(spec.mat_border_left)
    right = parse_measurement(spec.mat_border_right)
    top = parse_measurement(spec.mat_border_top)
    bottom = parse_measurement(spec.mat_border_bottom)
    reveals = parse_measurement(spec.mat1_reveal) + parse_measurement(spec.mat2_reveal)

    outer_w = width + 2 * border_all + left + right
    outer_h = height + 2 * border_all + top + bottom

    united_inches = outer_w + outer_h + reveals
    square_inches = max(0.0, outer_w + reveals / 2) * max(0.0, outer_h + reveals / 2)

    return Dimensions(
        outer_width=outer_w,
        outer_height=outer_h,
        united_inches=max(0.0, united_inches),
        square_inches=square_inches,
    )


# ----------------------------
# Frame cost
# ----------------------------
def uses_stacker(spec: OrderSpecification) -> bool:
    return bool(spec.stacker_frame) and parse_measurement(spec.shadow_depth) > 0


def is_standalone(spec: OrderSpecification) -> bool:
    return not _has_sku(spec.frame_sku)


def standard_frame_cost(spec: OrderSpecification, dims: Dimensions,
                        catalog: CatalogIndex, config: PricingConfig) -> FrameCost:
    sku = _sku(spec.frame_sku)
    moulding = catalog.lookup_moulding(sku) if _has_sku(sku) else None
    if moulding is None:
        if _has_sku(sku):
            logger.debug("Unknown moulding SKU %r; using defaults", sku)
        moulding_width = knobs.DEFAULT_MOULDING_WIDTH
        join_cost = knobs.DEFAULT_JOIN_COST
    else:
        # blank or zero width in the catalog sheet
        moulding_width = moulding.width if moulding.width > 0 else knobs.DEFAULT_MOULDING_WIDTH
        join_cost = moulding.join_cost

    if spec.chop_only:
        join_feet = config.chop_only_join_ft
    else:
        join_feet = max(4, math.ceil((dims.united_inches * 2 + 8 + moulding_width * 4) / 12))

    return FrameCost(strategy="standard", cost=join_cost * join_feet, join_feet=join_feet)


def stacker_frame_cost(spec: OrderSpecification, dims: Dimensions, config: PricingConfig) -> FrameCost:
    """
    Builds the shadow depth out of stacker frame layers, deepest first.

    Greedy: each catalog depth is used as many times as it fits in what is
    left. Depth the catalog cannot reach exactly is left uncovered.
    """
    perimeter_ft = 2 * (max(0.0, dims.outer_width) + max(0.0, dims.outer_height)) / 12
    remaining = parse_measurement(spec.shadow_depth)

    layers: List[StackerLayer] = []
    for frame in sorted(config.stacker_frames, key=lambda f: f.depth, reverse=True):
        if remaining <= 0:
            break
        count = int(math.floor(remaining / frame.depth + _DEPTH_EPS))
        if count <= 0:
            continue
        layers.append(StackerLayer(
            sku=frame.sku,
            depth=frame.depth,
            count=count,
            cost=perimeter_ft * frame.price_per_ft * count,
        ))
        remaining -= count * frame.depth

    uncovered = max(0.0, remaining) if remaining > _DEPTH_EPS else 0.0
    if uncovered:
        logger.debug("Stacker catalog leaves %.3f in of shadow depth uncovered", uncovered)

    cost = sum(layer.cost for layer in layers) + config.stacker_assembly_charge
    return FrameCost(strategy="stacker", cost=cost, layers=layers, uncovered_depth=uncovered)


def resolve_frame_cost(spec: OrderSpecification, dims: Dimensions,
                       catalog: CatalogIndex, config: PricingConfig) -> FrameCost:
    if uses_stacker(spec):
        return stacker_frame_cost(spec, dims, config)
    return standard_frame_cost(spec, dims, catalog, config)


# ----------------------------
# Add-ons
# ----------------------------
def add_on_costs(spec: OrderSpecification, dims: Dimensions,
                 catalog: CatalogIndex, config: PricingConfig) -> Dict[str, float]:
    """Pre-markup cost of every add-on on the order, keyed by component."""
    standalone = knobs.STANDALONE_MULTIPLIER if is_standalone(spec) else 1.0
    sq_in = dims.square_inches
    costs: Dict[str, float] = {}

    acrylic = _sku(spec.acrylic_type)
    if acrylic and acrylic != "None":
        costs["acrylic"] = config.acrylic_prices.get(acrylic, 0.0) * sq_in * standalone

    backing = _sku(spec.backing_type)
    if backing and backing != "None":
        costs["backing"] = config.backing_prices.get(backing, 0.0) * standalone

    for n, mat_sku in enumerate((spec.mat1_sku, spec.mat2_sku, spec.mat3_sku), start=1):
        if not _has_sku(mat_sku):
            continue
        supply = catalog.lookup_supply(_sku(mat_sku))
        if supply is None:
            logger.debug("Unknown mat SKU %r; using default price", mat_sku)
            price = knobs.DEFAULT_MAT_PRICE
        else:
            price = supply.price
        costs[f"mat{n}"] = price * standalone

    openings = max(0, int(parse_measurement(spec.extra_mat_openings)))
    if openings:
        costs["extra_mat_openings"] = openings * knobs.EXTRA_MAT_OPENING

    if spec.print_paper:
        costs["print_paper"] = knobs.PRINT_PAPER_PER_SQ_IN * sq_in
    if spec.dry_mount:
        costs["dry_mount"] = knobs.DRY_MOUNT_PER_SQ_IN * sq_in
    if spec.print_canvas:
        rolled = (spec.print_canvas_wrap_style or "").strip().lower() == "rolled"
        rate = knobs.PRINT_CANVAS_ROLLED_PER_SQ_IN if rolled else knobs.PRINT_CANVAS_PER_SQ_IN
        costs["print_canvas"] = rate * sq_in

    if spec.engraved_plaque:
        costs["engraved_plaque"] = knobs.ENGRAVED_PLAQUE
    if spec.leds:
        costs["leds"] = knobs.LEDS
    if spec.shadowbox_fitting:
        costs["shadowbox_fitting"] = knobs.SHADOWBOX_FITTING
    if spec.additional_labor:
        costs["additional_labor"] = knobs.ADDITIONAL_LABOR

    return costs


# ----------------------------
# Shipping + tax
# ----------------------------
def is_remote(destination: Optional[str]) -> bool:
    return bool(_REMOTE_RE.search(destination or ""))


def shipping_cost(united_inches: float, config: PricingConfig, *, chop_only: bool = False,
                  delivery_method: Optional[str] = None, destination: Optional[str] = None) -> float:
    if (delivery_method or "").strip().lower() == "pickup":
        return 0.0
    if chop_only:
        return float(knobs.CHOP_ONLY_SHIPPING)

    tiers = sorted(config.shipping_tiers, key=lambda t: t.min)
    rate = tiers[0].rate
    for tier in tiers:
        if tier.contains(united_inches):
            rate = tier.rate
            break

    if is_remote(destination) and united_inches < knobs.REMOTE_SURCHARGE_BELOW_UI:
        rate += knobs.REMOTE_SURCHARGE

    return float(rate)


def sales_tax(item_total: float, destination: Optional[str]) -> float:
    if _TAXABLE_RE.search(destination or ""):
        return item_total * knobs.SALES_TAX_RATE
    return 0.0


# ----------------------------
# Totals
# ----------------------------
def _price_item(spec: OrderSpecification, catalog: CatalogIndex, config: PricingConfig) -> Dict[str, Any]:
    dims = compute_dimensions(spec)
    frame = resolve_frame_cost(spec, dims, catalog, config)
    add_ons = add_on_costs(spec, dims, catalog, config)

    markup = config.stacker_markup if frame.strategy == "stacker" else config.markup
    quantity = _quantity(spec.quantity)
    factor = markup * quantity

    components = {"frame": frame.cost}
    components.update(add_ons)
    item_total = sum(components.values()) * factor

    measurements: Dict[str, Any] = {
        "united_inches": round(dims.united_inches, 4),
        "square_inches": round(dims.square_inches, 4),
        "markup": markup,
        "quantity": quantity,
    }
    if frame.strategy == "stacker":
        measurements["stacker_layers"] = [
            {"sku": layer.sku, "depth": layer.depth, "count": layer.count} for layer in frame.layers
        ]
        measurements["uncovered_depth"] = round(frame.uncovered_depth, 4)
    else:
        measurements["join_feet"] = frame.join_feet

    return {
        "dims": dims,
        "item_total": item_total,
        "breakdown": {name: _money(cost * factor) for name, cost in components.items()},
        "measurements": measurements,
    }


def _assemble(item_total: float, shipping: float, destination: Optional[str],
              deposit: Number) -> Dict[str, str]:
    tax = sales_tax(item_total, destination)
    total = item_total + shipping + tax
    balance = total - parse_currency(deposit)

    result = {
        "item_total": _money(item_total),
        "shipping": _money(shipping),
    }
    if tax > 0:
        result["sales_tax"] = _money(tax)
    result["total"] = _money(total)
    result["balance"] = _money(balance)
    return result


def calculate(spec: OrderSpecification, catalog: CatalogIndex, config: PricingConfig) -> Dict[str, Any]:
    """
    Prices one frame order.

    Pure: the result depends only on the three arguments. The discount text
    is carried on the order but is not taken off the total.
    """
    item = _price_item(spec, catalog, config)
    shipping = shipping_cost(
        item["dims"].united_inches,
        config,
        chop_only=spec.chop_only,
        delivery_method=spec.delivery_method,
        destination=spec.city_state_zip,
    )

    result: Dict[str, Any] = _assemble(item["item_total"], shipping, spec.city_state_zip, spec.deposit)
    result["breakdown"] = item["breakdown"]
    result["measurements"] = item["measurements"]
    return result


def calculate_multi_item(items: Sequence[OrderSpecification], catalog: CatalogIndex, config: PricingConfig, *,
                         city_state_zip: str = "", delivery_method: str = "shipping",
                         discount: str = "", deposit: Number = "") -> Dict[str, Any]:
    """
    Prices several frames going out as one order.

    Each line keeps its own item total. Shipping is charged once, sized by
    the largest piece; flat chop-only shipping only when every line is
    chop-only. Tax and deposit apply to the order as a whole.
    """
    priced = [_price_item(spec, catalog, config) for spec in items]
    item_total = sum(p["item_total"] for p in priced)

    if priced:
        largest_ui = max(p["dims"].united_inches for p in priced)
        shipping = shipping_cost(
            largest_ui,
            config,
            chop_only=all(spec.chop_only for spec in items),
            delivery_method=delivery_method,
            destination=city_state_zip,
        )
    else:
        shipping = 0.0

    result: Dict[str, Any] = {
        "items": [
            {
                "item_total": _money(p["item_total"]),
                "breakdown": p["breakdown"],
                "measurements": p["measurements"],
            }
            for p in priced
        ]
    }
    result.update(_assemble(item_total, shipping, city_state_zip, deposit))
    return result


if __name__ == "__main__":
    from catalog import get_catalog
    from pricing_config import default_config

    order = OrderSpecification(
        width="16 1/2",
        height="20 1/2",
        frame_sku="8694",
        mat_border_all="2 1/2",
        mat1_sku="B8501",
        acrylic_type="Non-Glare",
        city_state_zip="Hoboken, NJ 07030",
        deposit="$100",
    )

    result = calculate(order, get_catalog(), default_config())
    print("ITEM:", result["item_total"])
    print("SHIPPING:", result["shipping"])
    print("TAX:", result.get("sales_tax", "-"))
    print("TOTAL:", result["total"])
    print("BALANCE:", result["balance"])
