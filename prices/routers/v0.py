import logging
from decimal import Decimal
from typing import Annotated
from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field, PlainSerializer

from prices.config import settings
from prices.db.transfer import export_archive, import_archive
from prices.errors import PersistenceError, ResourceError

router = APIRouter(tags=["Prices"])
db = settings.get_db()

logger = logging.getLogger(__name__)

# Decimal totals are sent as JSON numbers, not strings
JsonDecimal = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class ImportStatisticsResponse(BaseModel):
    """Import result schema."""

    total_items: int = Field(..., description="Number of prices in the database.")
    total_categories: int = Field(
        ..., description="Number of distinct categories in the database."
    )
    total_price: JsonDecimal = Field(..., description="Sum of all prices in the database.")


@router.post("/prices", summary="Upload prices archive")
async def upload_prices(
    file: UploadFile | None = File(None, description="Zip archive with a CSV file"),
) -> ImportStatisticsResponse:
    """
    Import prices from a zip archive containing a single CSV file.

    The CSV file must have a header row followed by rows with columns
    `id,product_name,category,price,created_at`, dates in `YYYY-MM-DD`
    format. Prices whose id is already known are left unchanged. If any
    row is invalid, nothing is imported.

    Returns totals over all prices in the database after the import.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="Invalid file upload")

    data = await file.read()
    stats = await import_archive(data, db)

    return ImportStatisticsResponse(
        total_items=stats.total_items,
        total_categories=stats.total_categories,
        total_price=stats.total_price,
    )


@router.get(
    "/prices",
    summary="Download prices archive",
    response_class=Response,
    responses={200: {"content": {"application/zip": {}}}},
)
async def download_prices() -> Response:
    """
    Export all prices as a zip archive containing `data.csv` with columns
    `id,created_at,product_name,category,price`, ordered by id.
    """
    try:
        data = await export_archive(db)
    except (PersistenceError, ResourceError) as e:
        logger.error(f"Failed to export prices: {e}")
        raise HTTPException(status_code=500, detail="Failed to export data")

    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": "attachment; filename=data.zip"},
    )
