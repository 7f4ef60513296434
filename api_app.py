import logging
import os
import threading
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from catalog import CatalogIndex, get_catalog
from config_store import AuthorizationError, ConfigStore, build_store
from pricing_engine import OrderSpecification, calculate, calculate_multi_item

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))


# ----------------------------
# App + config
# ----------------------------
app = FastAPI(title="Frame Order Pricing API", version="1.0.0")

ALLOWED_ORIGINS = [o for o in os.environ.get("ALLOWED_ORIGINS", "").split(",") if o]
if ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Optional API key protection for the quote endpoints
API_KEY = os.environ.get("API_KEY", "")

_store: Optional[ConfigStore] = None
_store_lock = threading.Lock()


def get_store() -> ConfigStore:
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = build_store()
    return _store


def get_catalog_index() -> CatalogIndex:
    return get_catalog()


# ----------------------------
# Helpers
# ----------------------------
def _require_api_key(x_api_key: Optional[str]) -> None:
    if API_KEY:
        if not x_api_key or x_api_key != API_KEY:
            raise HTTPException(status_code=401, detail="Unauthorized")


# ----------------------------
# Request models
# ----------------------------
Measure = Optional[Union[float, str]]


class QuoteRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    width: Measure = 0
    height: Measure = 0
    quantity: Measure = 1
    frame_sku: Optional[str] = ""
    chop_only: bool = False

    mat_border_all: Measure = ""
    mat_border_left: Measure = ""
    mat_border_right: Measure = ""
    mat_border_top: Measure = ""
    mat_border_bottom: Measure = ""
    mat1_sku: Optional[str] = ""
    mat1_reveal: Measure = ""
    mat2_sku: Optional[str] = ""
    mat2_reveal: Measure = ""
    mat3_sku: Optional[str] = ""
    extra_mat_openings: Measure = 0

    acrylic_type: Optional[str] = "Standard"
    backing_type: Optional[str] = "White Foam"

    print_paper: bool = False
    print_paper_type: str = ""
    dry_mount: bool = False
    print_canvas: bool = False
    print_canvas_wrap_style: str = ""

    engraved_plaque: bool = False
    engraved_plaque_size: str = ""
    leds: bool = False
    shadowbox_fitting: bool = False
    additional_labor: bool = False

    stacker_frame: bool = False
    shadow_depth: Measure = 0

    delivery_method: str = "shipping"
    city_state_zip: str = ""
    discount: str = ""
    deposit: Measure = ""


class MultiQuoteRequest(BaseModel):
    items: List[QuoteRequest]
    city_state_zip: str = ""
    delivery_method: str = "shipping"
    discount: str = ""
    deposit: Measure = ""


class PasswordRequest(BaseModel):
    password: str = ""


class ConfigUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    password: str = ""


# ----------------------------
# Routes
# ----------------------------
@app.get("/health")
def health():
    return {"ok": True}


@app.post("/quote")
def quote(
    req: QuoteRequest,
    x_api_key: Optional[str] = Header(default=None),
    catalog: CatalogIndex = Depends(get_catalog_index),
    store: ConfigStore = Depends(get_store),
):
    _require_api_key(x_api_key)
    spec = OrderSpecification(**req.model_dump())
    return calculate(spec, catalog, store.current())


@app.post("/multi-quote")
def multi_quote(
    req: MultiQuoteRequest,
    x_api_key: Optional[str] = Header(default=None),
    catalog: CatalogIndex = Depends(get_catalog_index),
    store: ConfigStore = Depends(get_store),
):
    _require_api_key(x_api_key)
    items = [OrderSpecification(**item.model_dump()) for item in req.items]
    return calculate_multi_item(
        items,
        catalog,
        store.current(),
        city_state_zip=req.city_state_zip,
        delivery_method=req.delivery_method,
        discount=req.discount,
        deposit=req.deposit,
    )


@app.post("/control-panel/login")
def control_panel_login(req: PasswordRequest, store: ConfigStore = Depends(get_store)):
    if not store.verify_password(req.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    return {"ok": True}


@app.get("/control-panel/config")
def control_panel_config(store: ConfigStore = Depends(get_store)):
    return store.current().public_dict()


@app.post("/control-panel/config")
def control_panel_update(req: ConfigUpdateRequest, store: ConfigStore = Depends(get_store)):
    updates: Dict[str, Any] = dict(req.model_extra or {})
    try:
        config = store.update(req.password, updates)
    except AuthorizationError:
        raise HTTPException(status_code=401, detail="Invalid password")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return config.public_dict()


@app.get("/catalog/mouldings")
def catalog_mouldings(catalog: CatalogIndex = Depends(get_catalog_index)):
    return [asdict(m) for m in catalog.mouldings()]


@app.get("/catalog/supplies")
def catalog_supplies(catalog: CatalogIndex = Depends(get_catalog_index)):
    return [asdict(s) for s in catalog.supplies()]
