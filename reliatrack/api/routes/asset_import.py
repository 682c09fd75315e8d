"""
Bulk asset import.
"""

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.asset import AssetResponse
from reliatrack.services.exceptions import ValidationFailed
from reliatrack.services.import_service import SAMPLE_ROW, TEMPLATE_COLUMNS, ImportService

router = APIRouter()


class ImportRequest(BaseModel):
    assets: list[dict[str, Any]] = Field(..., min_length=1)


@router.get("/import/template")
async def import_template(current_user: CurrentUserDep):
    """Column names and one example row for spreadsheet imports."""
    return {
        "columns": TEMPLATE_COLUMNS,
        "required": ["name", "type", "manufacturer", "model", "location"],
        "sample": SAMPLE_ROW,
    }


@router.post(
    "/import",
    status_code=status.HTTP_201_CREATED,
    responses={207: {"description": "Some rows failed"}},
)
async def import_assets(body: ImportRequest, current_user: CurrentUserDep, db: DatabaseDep):
    """
    Insert rows best-effort.

    201 when every row is stored, 207 when some rows fail, 400 when none do.
    """
    result = await ImportService(db).import_assets(current_user.id, body.assets)
    inserted = result["inserted"]
    failed = result["failed"]

    if not inserted:
        raise ValidationFailed(
            "No assets were imported",
            errors=[
                {"field": f"assets.{row['row']}.{error['field']}", "message": error["message"]}
                for row in failed
                for error in row["errors"]
            ],
        )

    content = {
        "message": f"Imported {len(inserted)} of {len(body.assets)} assets",
        "inserted_count": len(inserted),
        "failed_count": len(failed),
        "assets": [AssetResponse.from_asset(asset) for asset in inserted],
        "failed": failed,
        "warnings": result["warnings"],
    }
    return JSONResponse(
        status_code=status.HTTP_207_MULTI_STATUS if failed else status.HTTP_201_CREATED,
        content=jsonable_encoder(content),
    )
