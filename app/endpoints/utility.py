import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.core.constants import UploadKindEnum
from app.schemas.response import APIResponse
from app.schemas.user import UserContext
from app.schemas.utility import UploadResult
from app.services.storage import storage_service
from app.utils import deps
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload/{kind}", response_model=APIResponse[UploadResult])
async def upload_file_to_cloud(
    kind: UploadKindEnum,
    file: UploadFile = File(...),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    """Upload an avatar, course thumbnail or lesson video and return its public URL."""
    if kind != UploadKindEnum.AVATAR and permission_helper.is_student(context):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Students can only upload avatars."
        )

    file_bytes = await file.read()
    result = storage_service.upload(kind, file_bytes, filename=file.filename, content_type=file.content_type)
    logger.info(f"User {context.user.id} uploaded {kind.value}: {result.key}")
    return APIResponse(message="File uploaded successfully", data=result)
