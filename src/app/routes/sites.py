"""
Sites Routes: 템플릿으로 사이트 생성.

- POST /api/sites → 새 site_id
"""

import logging

from fastapi import APIRouter, Form, HTTPException, Request

from src.app.components import Components
from src.core.ids import is_valid_record_id
from src.domain.errors import NOT_FOUND_CODES, ArtifactError, ErrorCodes

logger = logging.getLogger(__name__)

# Routers
api_router = APIRouter()  # API endpoints


def get_components(request: Request) -> Components:
    """Request에서 컴포넌트 가져오기."""
    return request.app.state.components


@api_router.post("")
async def create_site(
    request: Request,
    template_id: str = Form(...),
    owner_id: str = Form(...),
) -> dict[str, str]:
    """템플릿 → 새 사이트."""
    if not is_valid_record_id(template_id):
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCodes.TEMPLATE_NOT_FOUND, "message": f"Template '{template_id}' not found"},
        )

    materializer = get_components(request).materializer

    try:
        site_id = await materializer.materialize(template_id, owner_id)
    except ArtifactError as e:
        if e.code in NOT_FOUND_CODES:
            raise HTTPException(
                status_code=404,
                detail={"code": e.code, "message": e.message},
            ) from e
        logger.error(f"Site creation from template {template_id} failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"code": e.code, "message": "Failed to create site"},
        ) from e

    return {"site_id": site_id}
