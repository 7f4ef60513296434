# pricing_config.py
import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Tuple

import tuning_knobs as knobs


@dataclass(frozen=True)
class ShippingTier:
    min: float
    max: float
    rate: float

    def contains(self, united_inches: float) -> bool:
        return self.min <= united_inches <= self.max


@dataclass(frozen=True)
class StackerFrame:
    sku: str
    depth: float
    price_per_ft: float


@dataclass(frozen=True)
class PricingConfig:
    """
    One snapshot of the runtime pricing levers.

    Snapshots are never mutated; an update builds a new one and the
    ConfigStore swaps it in. Calculations take the snapshot they were handed.
    """
    markup: float
    stacker_markup: float
    chop_only_join_ft: float
    shipping_tiers: Tuple[ShippingTier, ...]
    acrylic_prices: Mapping[str, float]
    backing_prices: Mapping[str, float]
    stacker_frames: Tuple[StackerFrame, ...]
    stacker_assembly_charge: float
    auth_secret_digest: str

    def updated(self, updates: Mapping[str, Any]) -> "PricingConfig":
        changes = {}
        for key, value in updates.items():
            name = _ALIASES.get(key, key)
            if name not in _COERCE:
                raise ValueError(f"unknown pricing lever: {key}")
            changes[name] = _COERCE[name](value)
        return replace(self, **changes)

    def public_dict(self) -> Dict[str, Any]:
        # never expose the password digest
        d = asdict(self)
        d.pop("auth_secret_digest")
        d["acrylic_prices"] = dict(self.acrylic_prices)
        d["backing_prices"] = dict(self.backing_prices)
        return d

    def to_dict(self) -> Dict[str, Any]:
        d = self.public_dict()
        d["auth_secret_digest"] = self.auth_secret_digest
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingConfig":
        base = default_config()
        digest = data.get("auth_secret_digest")
        levers = {k: v for k, v in data.items() if k != "auth_secret_digest"}
        cfg = base.updated(levers)
        if digest:
            cfg = replace(cfg, auth_secret_digest=str(digest))
        return cfg


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValueError(msg)


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"expected a number, got {value!r}")
    _require(math.isfinite(number), f"expected a finite number, got {value!r}")
    return number


def _tiers(rows: Any) -> Tuple[ShippingTier, ...]:
    _require(isinstance(rows, (list, tuple)) and len(rows) > 0, "shipping tiers must be a non-empty list")
    tiers = []
    for row in rows:
        if isinstance(row, ShippingTier):
            tiers.append(row)
            continue
        _require(isinstance(row, Mapping), f"bad shipping tier: {row!r}")
        tier = ShippingTier(_number(row.get("min")), _number(row.get("max")), _number(row.get("rate")))
        _require(tier.min <= tier.max, f"shipping tier min > max: {row!r}")
        tiers.append(tier)
    return tuple(sorted(tiers, key=lambda t: t.min))


def _price_table(rows: Any) -> Dict[str, float]:
    # control panel sends [{"type": ..., "pricePerSqIn"/"price": ...}]
    if isinstance(rows, Mapping):
        return {str(k): _number(v) for k, v in rows.items()}
    _require(isinstance(rows, (list, tuple)), f"bad price table: {rows!r}")
    table = {}
    for row in rows:
        _require(isinstance(row, Mapping) and "type" in row, f"bad price row: {row!r}")
        price = row.get("pricePerSqIn", row.get("price"))
        table[str(row["type"])] = _number(price)
    return table


def _stacker_frames(rows: Any) -> Tuple[StackerFrame, ...]:
    _require(isinstance(rows, (list, tuple)), f"bad stacker catalog: {rows!r}")
    frames = []
    for row in rows:
        if isinstance(row, StackerFrame):
            frames.append(row)
            continue
        _require(isinstance(row, Mapping), f"bad stacker frame: {row!r}")
        frame = StackerFrame(
            sku=str(row.get("sku", "")),
            depth=_number(row.get("depth")),
            price_per_ft=_number(row.get("price_per_ft", row.get("pricePerFt"))),
        )
        _require(frame.depth > 0, f"stacker depth must be > 0: {row!r}")
        frames.append(frame)
    return tuple(frames)


_COERCE = {
    "markup": _number,
    "stacker_markup": _number,
    "chop_only_join_ft": _number,
    "shipping_tiers": _tiers,
    "acrylic_prices": _price_table,
    "backing_prices": _price_table,
    "stacker_frames": _stacker_frames,
    "stacker_assembly_charge": _number,
}

# camelCase names used by the control panel form
_ALIASES = {
    "stackerMarkup": "stacker_markup",
    "chopOnlyJoinFt": "chop_only_join_ft",
    "shippingRates": "shipping_tiers",
    "acrylicPrices": "acrylic_prices",
    "backingPrices": "backing_prices",
    "stackerFrames": "stacker_frames",
    "stackerAssemblyCharge": "stacker_assembly_charge",
}


def default_config() -> PricingConfig:
    return PricingConfig(
        markup=float(knobs.MARKUP),
        stacker_markup=float(knobs.STACKER_MARKUP),
        chop_only_join_ft=float(knobs.CHOP_ONLY_JOIN_FT),
        shipping_tiers=_tiers(knobs.SHIPPING_TIERS),
        acrylic_prices=_price_table(knobs.ACRYLIC_PRICE_PER_SQ_IN),
        backing_prices=_price_table(knobs.BACKING_PRICE),
        stacker_frames=_stacker_frames(knobs.STACKER_FRAMES),
        stacker_assembly_charge=float(knobs.STACKER_ASSEMBLY_CHARGE),
        auth_secret_digest=knobs.CONTROL_PANEL_PASSWORD_SHA256,
    )
