"""Training material admin endpoints.

Routes:
- GET /materials - List materials (active only unless include_inactive)
- POST /materials - Create a material
- GET /materials/{material_id} - Get one material
- PUT /materials/{material_id} - Replace a material
- DELETE /materials/{material_id} - Soft-delete a material
- POST /materials/{material_id}/attachments - Attach an uploaded file
- DELETE /materials/{material_id}/attachments/{attachment_id} - Remove an attachment

Every mutation resets the training context of all live chat sessions.

Dependencies: onboarding_buddy.application.services.material_service
System role: Material administration HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from onboarding_buddy.api.deps import get_material_service
from onboarding_buddy.application.services.material_service import MaterialService
from onboarding_buddy.core.exceptions import MaterialNotFoundError, ValidationError
from onboarding_buddy.models.material import MaterialRequest, MaterialResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get("", response_model=list[MaterialResponse])
async def list_materials(
    include_inactive: bool = False,
    service: MaterialService = Depends(get_material_service),
) -> list[MaterialResponse]:
    """List materials ordered by category then title."""
    return await service.list_materials(include_inactive=include_inactive)


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    request: MaterialRequest,
    service: MaterialService = Depends(get_material_service),
) -> MaterialResponse:
    """Create a training material."""
    return await service.create_material(request)


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: str,
    service: MaterialService = Depends(get_material_service),
) -> MaterialResponse:
    """Get one material with its attachments.

    Raises:
        HTTPException(400): Malformed id
        HTTPException(404): Material not found
    """
    try:
        return await service.get_material(material_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: str,
    request: MaterialRequest,
    service: MaterialService = Depends(get_material_service),
) -> MaterialResponse:
    """Replace a material's fields."""
    try:
        return await service.update_material(material_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_material(
    material_id: str,
    service: MaterialService = Depends(get_material_service),
) -> Response:
    """Soft-delete a material."""
    try:
        await service.delete_material(material_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{material_id}/attachments",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_attachment(
    material_id: str,
    file: UploadFile = File(...),
    description: str | None = Form(None),
    processed_content: str | None = Form(None),
    service: MaterialService = Depends(get_material_service),
) -> MaterialResponse:
    """Attach an uploaded file to a material.

    Args:
        material_id: Material id
        file: Uploaded file
        description: Optional attachment description
        processed_content: Text already extracted from the file, if any
        service: Injected MaterialService

    Returns:
        MaterialResponse: Material with the new attachment
    """
    content = await file.read()
    try:
        return await service.add_attachment(
            material_id,
            file_name=file.filename or "upload",
            content_type=file.content_type or "application/octet-stream",
            file_content=content,
            processed_content=processed_content,
            description=description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.delete(
    "/{material_id}/attachments/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_attachment(
    material_id: str,
    attachment_id: str,
    service: MaterialService = Depends(get_material_service),
) -> Response:
    """Remove an attachment from a material."""
    try:
        await service.remove_attachment(material_id, attachment_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
