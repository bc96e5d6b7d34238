"""
Design catalog routes - browse, search, add, delete, price lookup, and
design-number recognition from a tag photo.
"""
import os
import shutil
import tempfile
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, status, Depends, UploadFile, File, Query
from pydantic import BaseModel, Field

import config
from access.access_gate import AdminSession
from api.auth.dependencies import (
    get_admin_session, get_optional_session, get_catalog, get_recognizer,
)
from api.auth.models import ErrorResponse, MessageResponse

router = APIRouter()


# ── Request/Response Models ───────────────────────────────────────

class DesignCreate(BaseModel):
    """Submitted add-design form. Numeric fields may arrive as strings."""
    designNumber: str = ""
    image: str = Field("", description="Image reference or data URL")
    fabrics: List[Dict[str, Any]] = Field(default_factory=list)
    materials: List[Dict[str, Any]] = Field(default_factory=list)
    cuttingSize: str = ""
    notes: str = ""


class PriceResponse(BaseModel):
    designNumber: str
    price: float


class RecognitionResponse(BaseModel):
    designNumber: str
    designs: List[Dict[str, Any]]


def _public_view(design: Dict[str, Any], session: Optional[AdminSession]) -> Dict[str, Any]:
    """Hide pricing from non-admin viewers."""
    if session is not None and session.is_admin:
        return design
    return {k: v for k, v in design.items() if k != 'totalPrice'}


# ── Routes ────────────────────────────────────────────────────────

@router.get(
    "",
    summary="List or search designs",
)
async def list_designs(
    q: str = Query("", description="Case-insensitive design number filter"),
    session: Optional[AdminSession] = Depends(get_optional_session),
):
    """Designs most-recent-first. `totalPrice` is included for admins only."""
    catalog = get_catalog()
    return [_public_view(d.to_dict(), session) for d in catalog.search(q)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Add a design",
)
async def create_design(body: DesignCreate, session: AdminSession = Depends(get_admin_session)):
    """
    Add a design to the top of the catalog.

    - **designNumber** and **image** are required
    - **totalPrice** is computed from fabrics and materials
    """
    design = get_catalog().add(
        design_number=body.designNumber,
        image=body.image,
        fabrics=body.fabrics,
        materials=body.materials,
        cutting_size=body.cuttingSize,
        notes=body.notes,
    )
    return design.to_dict()


@router.post(
    "/recognize",
    response_model=RecognitionResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Read a design number from a tag photo",
)
async def recognize_design(
    file: UploadFile = File(..., description="Photo of a design tag (jpg, png, webp)"),
    session: Optional[AdminSession] = Depends(get_optional_session),
):
    """
    Run OCR on the photo, extract the design number (e.g. `D.No 452`) and
    return the designs whose number contains it.
    """
    ext = os.path.splitext(file.filename or "")[1].lower().lstrip('.')
    if ext not in config.ALLOWED_IMAGE_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: .{ext}. Allowed: {', '.join(config.ALLOWED_IMAGE_FORMATS)}",
        )

    temp_dir = tempfile.mkdtemp(prefix="stitchbook_tag_")
    try:
        image_path = os.path.join(temp_dir, f"{uuid.uuid4().hex}.{ext}")
        content = await file.read()
        with open(image_path, "wb") as out:
            out.write(content)

        number, designs = await get_recognizer().find_designs(image_path, get_catalog())
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    return RecognitionResponse(
        designNumber=number,
        designs=[_public_view(d.to_dict(), session) for d in designs],
    )


@router.get(
    "/price/{design_number}",
    response_model=PriceResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Look up a design's price by exact number",
)
async def lookup_price(design_number: str, session: AdminSession = Depends(get_admin_session)):
    price = get_catalog().lookup_price(design_number)
    return PriceResponse(designNumber=design_number, price=price)


@router.get(
    "/{design_id}",
    responses={404: {"model": ErrorResponse}},
    summary="Get one design",
)
async def get_design(design_id: str, session: Optional[AdminSession] = Depends(get_optional_session)):
    design = get_catalog().get(design_id)
    if design is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Design not found")
    return _public_view(design.to_dict(), session)


@router.delete(
    "/{design_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a design",
)
async def delete_design(design_id: str, session: AdminSession = Depends(get_admin_session)):
    """Existing bills that mention the design number are not changed."""
    if not get_catalog().remove(design_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Design not found")
    return MessageResponse(message="Design deleted", detail=design_id)
