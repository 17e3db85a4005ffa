"""
Plant API Router.

Analysis, overlay content (recipes, decoration guides, stage images),
per-session workspaces and consultation chats.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from apps.common.globalization import DEFAULT_LANGUAGE, list_languages, localized_text
from apps.common.utils import decode_images_b64, read_upload_files
from apps.deps import PlantServices
from apps.plant.consultation import ConsultationRoom
from apps.plant.usecases.analyze import PlantAnalyzeUsecase
from apps.plant.usecases.consult import PlantConsultUsecase
from apps.plant.usecases.guides import PlantGuideUsecase
from apps.plant.workspace import PlantWorkspace
from libs.llm_gemini import ChatError, GatewayError

logger = logging.getLogger(__name__)


# --- Request/Response Models ---


class PlantAnalyzeRequest(BaseModel):
    images_b64: List[str] = Field(..., min_length=1)
    language: str = DEFAULT_LANGUAGE


class PlantResultResponse(BaseModel):
    success: bool
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class RecipeRequest(BaseModel):
    dish_name: str = Field(..., min_length=1)
    plant_name: str = Field(..., min_length=1)
    language: str = DEFAULT_LANGUAGE


class DecorationRequest(BaseModel):
    style_name: str = Field(..., min_length=1)
    plant_name: str = Field(..., min_length=1)
    language: str = DEFAULT_LANGUAGE


class StageImageRequest(BaseModel):
    plant_name: str = Field(..., min_length=1)
    stage_name: str = Field(..., min_length=1)


class StageImageResponse(BaseModel):
    success: bool
    image: Optional[str] = None  # data URL; None when no image was produced
    error: Optional[str] = None


class WorkspaceCreateRequest(BaseModel):
    language: str = DEFAULT_LANGUAGE


class WorkspaceImagesRequest(BaseModel):
    images_b64: List[str] = Field(..., min_length=1)


class LanguageRequest(BaseModel):
    language: str


class WorkspaceResponse(BaseModel):
    success: bool
    workspace: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ConsultationOpenRequest(BaseModel):
    plant_name: str = Field(..., min_length=1)
    language: str = DEFAULT_LANGUAGE
    diseases: List[Dict[str, Any]] = Field(default_factory=list)
    plant_context: Optional[str] = None


class ConsultationMessageRequest(BaseModel):
    text: str = Field(..., min_length=1)


class ConsultationResponse(BaseModel):
    success: bool
    consultation_id: Optional[str] = None
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


def _unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _room_response(room: ConsultationRoom, error: Optional[str] = None) -> ConsultationResponse:
    return ConsultationResponse(
        success=error is None,
        consultation_id=room.id,
        messages=[m.model_dump(mode="json") for m in room.messages],
        error=error,
    )


def build_plant_router(services: PlantServices) -> APIRouter:
    """Build and return the plant API router."""
    router = APIRouter()

    analyze_uc = PlantAnalyzeUsecase(services.gateway)
    guide_uc = PlantGuideUsecase(services.gateway)
    consult_uc = PlantConsultUsecase(services.gateway, services.consultations)

    def _workspace(workspace_id: str) -> PlantWorkspace:
        ws = services.workspaces.get(workspace_id)
        if ws is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
        return ws

    def _room(consultation_id: str) -> ConsultationRoom:
        room = consult_uc.get(consultation_id)
        if room is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Consultation not found")
        return room

    async def _analyze(images, language: str) -> PlantResultResponse:
        try:
            result = await analyze_uc.execute_async(images, language)
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError as e:
            logger.error("Batch analysis failed: %s", e)
            return PlantResultResponse(success=False, error=localized_text(language, "error_msg"))
        return PlantResultResponse(success=True, result=result.model_dump())

    @router.get("/api/plant/languages")
    async def languages():
        return {"languages": list_languages(), "default": DEFAULT_LANGUAGE}

    # --- stateless analysis ---

    @router.post("/api/plant/analyze", response_model=PlantResultResponse)
    async def plant_analyze(req: PlantAnalyzeRequest):
        try:
            images = decode_images_b64(req.images_b64)
        except ValueError as e:
            raise _unprocessable(e) from e
        return await _analyze(images, req.language)

    @router.post("/api/plant/analyze_upload", response_model=PlantResultResponse)
    async def plant_analyze_upload(
        language: str = Form(DEFAULT_LANGUAGE),
        images: List[UploadFile] = File(...),
    ):
        images_data = await read_upload_files(images)
        return await _analyze(images_data, language)

    # --- overlays ---

    @router.post("/api/plant/recipe", response_model=PlantResultResponse)
    async def plant_recipe(req: RecipeRequest):
        try:
            recipe = await guide_uc.recipe_async(req.dish_name, req.plant_name, req.language)
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError as e:
            logger.error("Failed to fetch recipe: %s", e)
            return PlantResultResponse(success=False, error=str(e))
        return PlantResultResponse(success=True, result=recipe.model_dump())

    @router.post("/api/plant/decoration", response_model=PlantResultResponse)
    async def plant_decoration(req: DecorationRequest):
        try:
            guide = await guide_uc.decoration_async(req.style_name, req.plant_name, req.language)
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError as e:
            logger.error("Failed to fetch decoration guide: %s", e)
            return PlantResultResponse(success=False, error=str(e))
        return PlantResultResponse(success=True, result=guide.model_dump())

    @router.post("/api/plant/life-cycle-image", response_model=StageImageResponse)
    async def plant_life_cycle_image(req: StageImageRequest):
        try:
            image = await services.gateway.generate_life_cycle_stage_image(
                req.plant_name, req.stage_name
            )
        except GatewayError as e:
            logger.error("Failed to generate stage image: %s", e)
            return StageImageResponse(success=False, error=str(e))
        return StageImageResponse(success=True, image=image.to_data_url() if image else None)

    # --- workspaces ---

    @router.post("/api/plant/workspaces", response_model=WorkspaceResponse)
    async def workspace_create(req: WorkspaceCreateRequest):
        try:
            ws = services.workspaces.create(req.language)
        except ValueError as e:
            raise _unprocessable(e) from e
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.get("/api/plant/workspaces/{workspace_id}", response_model=WorkspaceResponse)
    async def workspace_get(workspace_id: str):
        return WorkspaceResponse(success=True, workspace=_workspace(workspace_id).to_dict())

    @router.post("/api/plant/workspaces/{workspace_id}/images", response_model=WorkspaceResponse)
    async def workspace_add_images(workspace_id: str, req: WorkspaceImagesRequest):
        ws = _workspace(workspace_id)
        try:
            ws.add_images(decode_images_b64(req.images_b64))
        except ValueError as e:
            raise _unprocessable(e) from e
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.delete("/api/plant/workspaces/{workspace_id}/images/{index}", response_model=WorkspaceResponse)
    async def workspace_remove_image(workspace_id: str, index: int):
        ws = _workspace(workspace_id)
        try:
            ws.remove_image(index)
        except IndexError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.post("/api/plant/workspaces/{workspace_id}/analyze", response_model=WorkspaceResponse)
    async def workspace_analyze(workspace_id: str):
        ws = _workspace(workspace_id)
        try:
            await ws.analyze()
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError:
            return WorkspaceResponse(success=False, workspace=ws.to_dict(), error=ws.error)
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.put("/api/plant/workspaces/{workspace_id}/language", response_model=WorkspaceResponse)
    async def workspace_language(workspace_id: str, req: LanguageRequest):
        ws = _workspace(workspace_id)
        try:
            await ws.change_language(req.language)
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError:
            return WorkspaceResponse(success=False, workspace=ws.to_dict(), error=ws.error)
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.post("/api/plant/workspaces/{workspace_id}/reset", response_model=WorkspaceResponse)
    async def workspace_reset(workspace_id: str):
        ws = _workspace(workspace_id)
        ws.reset()
        return WorkspaceResponse(success=True, workspace=ws.to_dict())

    @router.delete("/api/plant/workspaces/{workspace_id}")
    async def workspace_delete(workspace_id: str):
        if not services.workspaces.delete(workspace_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
        return {"success": True}

    @router.get("/api/plant/workspaces/{workspace_id}/plants/{index}/stage-images")
    async def workspace_stage_images(workspace_id: str, index: int):
        ws = _workspace(workspace_id)
        try:
            card = ws.get_card(index)
        except IndexError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
        return {"success": True, **card.stage_images()}

    # --- consultations ---

    @router.post("/api/plant/consultations", response_model=ConsultationResponse)
    async def consultation_open(req: ConsultationOpenRequest):
        try:
            room = consult_uc.open(
                plant_name=req.plant_name,
                language=req.language,
                diseases=req.diseases,
                plant_context=req.plant_context,
            )
        except ValueError as e:
            raise _unprocessable(e) from e
        except GatewayError as e:
            logger.error("Failed to open consultation: %s", e)
            return ConsultationResponse(success=False, error=str(e))
        return _room_response(room)

    @router.get("/api/plant/consultations/{consultation_id}", response_model=ConsultationResponse)
    async def consultation_get(consultation_id: str):
        return _room_response(_room(consultation_id))

    @router.post(
        "/api/plant/consultations/{consultation_id}/messages",
        response_model=ConsultationResponse,
    )
    async def consultation_send(consultation_id: str, req: ConsultationMessageRequest):
        room = _room(consultation_id)
        try:
            await consult_uc.send_async(room, req.text)
        except ValueError as e:
            raise _unprocessable(e) from e
        except ChatError:
            return _room_response(room, error=localized_text(room.language, "chat_error"))
        return _room_response(room)

    @router.delete("/api/plant/consultations/{consultation_id}")
    async def consultation_close(consultation_id: str):
        if not consult_uc.close(consultation_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Consultation not found")
        return {"success": True}

    return router
