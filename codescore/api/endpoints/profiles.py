from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from codescore.api.dependencies import adapter_http_error, get_profile_service
from codescore.core.errors import AdapterError
from codescore.models.profile import ProfileRecord, RefreshReport, UserProfiles
from codescore.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


class ProfileRequest(BaseModel):
    username: str = Field(description="Username on the external platform")


@router.get("/{user_id}", response_model=UserProfiles)
async def list_profiles(user_id: str, service: ProfileService = Depends(get_profile_service)) -> UserProfiles:
    return await service.get_profiles(user_id)


@router.put("/{user_id}/refresh", response_model=RefreshReport)
async def refresh_profiles(user_id: str, service: ProfileService = Depends(get_profile_service)) -> RefreshReport:
    """Re-fetch every stored platform profile for the user and recompute the total."""
    return await service.refresh_all_profiles(user_id)


@router.post("/{user_id}/{platform}", response_model=ProfileRecord)
async def add_profile(
    user_id: str,
    platform: str,
    payload: ProfileRequest,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileRecord:
    """Verify a platform username and store it for the user."""
    try:
        return await service.verify_and_store_profile(user_id, platform, payload.username)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AdapterError as e:
        logger.info(f"[{user_id}] Verification of {platform} username {payload.username!r} failed: {e}")
        raise adapter_http_error(e)
