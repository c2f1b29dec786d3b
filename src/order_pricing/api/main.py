import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .. import __version__
from ..engine import (
    OrderBuilder,
    PricingError,
    build_pipeline,
    calculate_with_trace,
    stages_from_config,
    unwrap,
)
from ..ui.formatting import format_money
from .state import settings, tax_table

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Order Pricing API",
    description="Prices orders through a composable chain of pricing stages",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LineItemIn(BaseModel):
    sku: str
    quantity: int
    unit_price: Decimal


class StageIn(BaseModel):
    """One stage of the chain; the base stage is always implied."""
    type: str
    rate: Optional[Decimal] = None
    percent: Optional[Decimal] = None
    amount: Optional[Decimal] = None


class CalcRequest(BaseModel):
    items: List[LineItemIn]
    shipping_method: str = "standard"
    country: str = "US"
    stages: Optional[List[StageIn]] = None
    coupon_percent: Optional[Decimal] = None


@app.get("/")
async def root():
    return {"status": "online", "message": "Order Pricing API Active"}


@app.post("/calculate")
async def calculate_order(req: CalcRequest):
    try:
        builder = OrderBuilder().with_shipping(req.shipping_method).with_country(req.country)
        for item in req.items:
            builder.add_item(item.sku, item.quantity, item.unit_price)
        order = builder.build()

        if req.stages is not None:
            specs = [s.model_dump(exclude_none=True) for s in req.stages]
        else:
            specs = list(settings.default_stages)
        if req.coupon_percent is not None:
            specs.append({'type': 'coupon_percent', 'percent': req.coupon_percent})

        pipeline = build_pipeline(
            stages_from_config(specs, tax_rates=tax_table, shipping_fees=settings.shipping_fees)
        )
        result = calculate_with_trace(pipeline, order)
    except PricingError as e:
        logger.info("Rejected pricing request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Pricing request failed")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "total": str(result.total),
        "display_total": format_money(result.total),
        "stages": [stage.name for stage in unwrap(pipeline)],
        "trace": jsonable_encoder(result.trace),
    }


@app.get("/tax-rates/{country}")
async def get_tax_rate(country: str):
    code = country.strip().upper()
    return {
        "country": code,
        "rate": str(tax_table.rate_for_country(code)),
        "source": "table" if code in set(tax_table.rates_df['country']) else "default",
    }


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "version": __version__,
        "tax_rates_loaded": tax_table.loaded,
        "tax_rates_count": len(tax_table),
        "default_tax_rate": str(settings.default_tax_rate),
        "shipping_fees": {k: str(v) for k, v in settings.shipping_fees.items()},
        "default_stages": [s['type'] for s in settings.default_stages],
    }
