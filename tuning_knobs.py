# tuning_knobs.py
"""
TUNING KNOBS (EDIT THIS FILE)

Shop rates that only change when someone edits the code live here.
Sections 1-4 are only the STARTING values for the levers that can be
changed at runtime from the control panel (see pricing_config.py).
"""

# ============================================================
# 1) MARKUP (runtime levers, defaults)
# ============================================================
MARKUP = 2.75
STACKER_MARKUP = 2.5

# Chop-only orders assume a fixed length of moulding
CHOP_ONLY_JOIN_FT = 18

# ============================================================
# 2) SHIPPING TIERS by united inches (runtime lever, default)
# ============================================================
SHIPPING_TIERS = [
    {"min": 1,  "max": 30,  "rate": 9},
    {"min": 31, "max": 49,  "rate": 19},
    {"min": 50, "max": 74,  "rate": 29},
    {"min": 75, "max": 999, "rate": 250},
]

# ============================================================
# 3) GLAZING + BACKING (runtime levers, defaults)
# ============================================================
ACRYLIC_PRICE_PER_SQ_IN = {
    "Standard": 0.009,
    "Non-Glare": 0.018,
    "Museum Quality": 0.027,
}

BACKING_PRICE = {
    "None": 0,
    "White Foam": 2,
    "Black Foam": 2.5,
    "Acid Free": 3,
}

# ============================================================
# 4) STACKER / DEEP SHADOWBOX (runtime levers, defaults)
# ============================================================
STACKER_FRAMES = [
    {"sku": "9532", "depth": 2.5, "price_per_ft": 11.81},
    {"sku": "9533", "depth": 1.5, "price_per_ft": 8.36},
]

STACKER_ASSEMBLY_CHARGE = 29.17

# SHA-256 of the control panel password
CONTROL_PANEL_PASSWORD_SHA256 = "8a707e0ded3de11960657de67f2e66292900c86c1ecfe7e570167397943cdaf4"

# ============================================================
# 5) STANDALONE ORDERS (no frame)
# ============================================================
# Mats, acrylic and backing sold without a frame carry a premium
STANDALONE_MULTIPLIER = 3.0
NO_FRAME_SKUS = ("", "None")

# ============================================================
# 6) MATS
# ============================================================
DEFAULT_MAT_PRICE = 15
EXTRA_MAT_OPENING = 2.50

# Unknown moulding SKU
DEFAULT_MOULDING_WIDTH = 2
DEFAULT_JOIN_COST = 0

# ============================================================
# 7) PRINTING ($/sq in)
# ============================================================
PRINT_PAPER_PER_SQ_IN = 0.05
DRY_MOUNT_PER_SQ_IN = 0.03
PRINT_CANVAS_PER_SQ_IN = 0.08
PRINT_CANVAS_ROLLED_PER_SQ_IN = 0.055

# ============================================================
# 8) FIXED-FEE OPTIONS
# ============================================================
ENGRAVED_PLAQUE = 30
LEDS = 45
SHADOWBOX_FITTING = 17.50
ADDITIONAL_LABOR = 17.50

# ============================================================
# 9) SHIPPING EXTRAS + TAX
# ============================================================
CHOP_ONLY_SHIPPING = 29
REMOTE_SURCHARGE = 99
REMOTE_SURCHARGE_BELOW_UI = 75
REMOTE_REGIONS = ("HI", "AK", "PR", "Hawaii", "Alaska", "Puerto Rico")

TAXABLE_REGION = "NJ"
SALES_TAX_RATE = 0.07
