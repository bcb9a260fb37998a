"""Upload URL endpoint"""
from fastapi import APIRouter, Depends
from app.uploads.schemas import UploadUrlRequest, UploadUrlResponse
from app.uploads.storage import ObjectStorage, get_object_storage
from app.auth.middleware import JWTPayload, verify_token, check_permission

router = APIRouter(
    prefix="/uploads",
    tags=["uploads"],
)


@router.post("/url", response_model=UploadUrlResponse)
def create_upload_url(
    request: UploadUrlRequest,
    storage: ObjectStorage = Depends(get_object_storage),
    jwt_payload: JWTPayload = Depends(verify_token),
):
    """
    Presigned upload URL for a profile avatar, gallery image or intro video.

    Required permission: upload:create
    """
    check_permission(jwt_payload, "upload:create")

    return UploadUrlResponse(**storage.create_upload_url(request.bucket.value, jwt_payload.user_id))
