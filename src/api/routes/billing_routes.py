"""
Billing routes - edit the draft bill, save it, list saved bills, and
download the draft as PDF/CSV. All routes require an admin session.
"""
import os
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException, status, Depends, Query
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from api.auth.dependencies import (
    get_admin_session, get_billing_engine, get_bill_ledger, get_exporter,
)
from api.auth.models import ErrorResponse

router = APIRouter(dependencies=[Depends(get_admin_session)])

MEDIA_TYPES = {
    'pdf': 'application/pdf',
    'csv': 'text/csv',
}


# ── Request Models ────────────────────────────────────────────────

class ItemUpdate(BaseModel):
    """Change one field of a line item."""
    field: str = Field(..., description="designNumber, quantity or price")
    value: Union[str, int, float, None] = None


class GSTUpdate(BaseModel):
    gstPercentage: Union[str, int, float]


class CustomerUpdate(BaseModel):
    customerName: str = ""
    date: Optional[str] = Field(None, description="ISO date, yyyy-mm-dd")


# ── Draft ─────────────────────────────────────────────────────────

@router.get("/draft", summary="Current draft bill")
async def get_draft():
    return get_billing_engine().snapshot()


@router.post("/draft/new", summary="Discard the draft and start a new one")
async def new_draft():
    engine = get_billing_engine()
    engine.new_draft()
    return engine.snapshot()


@router.post(
    "/draft/items",
    status_code=status.HTTP_201_CREATED,
    summary="Append a blank line item",
)
async def add_item():
    engine = get_billing_engine()
    engine.add_item()
    return engine.snapshot()


@router.patch(
    "/draft/items/{index}",
    responses={422: {"model": ErrorResponse}},
    summary="Update a line item field",
)
async def update_item(index: int, body: ItemUpdate):
    """
    Setting **designNumber** to a catalog design fills in its price.
    Rejected values leave the draft unchanged.
    """
    engine = get_billing_engine()
    engine.set_item_field(index, body.field, body.value)
    return engine.snapshot()


@router.delete(
    "/draft/items/{index}",
    responses={422: {"model": ErrorResponse}},
    summary="Remove a line item",
)
async def remove_item(index: int):
    engine = get_billing_engine()
    engine.remove_item(index)
    return engine.snapshot()


@router.put(
    "/draft/gst",
    responses={422: {"model": ErrorResponse}},
    summary="Set the GST percentage",
)
async def set_gst(body: GSTUpdate):
    engine = get_billing_engine()
    engine.set_gst_percentage(body.gstPercentage)
    return engine.snapshot()


@router.put(
    "/draft/customer",
    responses={422: {"model": ErrorResponse}},
    summary="Set customer name and (optionally) bill date",
)
async def set_customer(body: CustomerUpdate):
    engine = get_billing_engine()
    if body.date:
        engine.set_date(body.date)
    engine.set_customer_name(body.customerName)
    return engine.snapshot()


@router.post(
    "/draft/save",
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Save the draft bill",
)
async def save_draft():
    """Requires a customer name and at least one item. A new draft is started."""
    saved = get_billing_engine().save_draft()
    return saved.to_dict()


@router.get(
    "/draft/export",
    responses={502: {"model": ErrorResponse}},
    summary="Download the draft as PDF or CSV",
)
async def export_draft(format: str = Query("pdf", pattern="^(pdf|csv)$")):
    path = await get_billing_engine().export_draft(get_exporter(), fmt=format)
    return FileResponse(path=path, media_type=MEDIA_TYPES[format], filename=os.path.basename(path))


# ── Saved bills ───────────────────────────────────────────────────

@router.get("/saved", summary="Bills saved this session")
async def list_saved() -> List[Dict[str, Any]]:
    return [bill.to_dict() for bill in get_billing_engine().saved_bills]


@router.get(
    "/saved/{bill_number}/export",
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Download a saved bill as PDF or CSV",
)
async def export_saved(bill_number: str, format: str = Query("pdf", pattern="^(pdf|csv)$")):
    bill = get_billing_engine().find_saved(bill_number)
    if bill is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    path = await get_exporter().export(bill.to_dict(), fmt=format)
    return FileResponse(path=path, media_type=MEDIA_TYPES[format], filename=os.path.basename(path))


@router.get(
    "/ledger",
    responses={404: {"model": ErrorResponse}},
    summary="Bills recorded in the persistent ledger",
)
async def list_ledger(limit: int = Query(100, ge=1, le=1000)):
    """Available when ENABLE_BILL_LEDGER is on."""
    ledger = get_bill_ledger()
    if ledger is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill ledger is disabled")
    return [bill.to_dict() for bill in ledger.list(limit=limit)]
