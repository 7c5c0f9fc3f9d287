# ultra_eval/api/v1/endpoints/uploads.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ultra_eval.api.deps import get_storage
from ultra_eval.core.security import get_current_student
from ultra_eval.models.student import Student
from ultra_eval.services.storage_service import AttachmentStorage, StorageError

router = APIRouter(tags=["uploads"])


@router.post("/uploads", status_code=status.HTTP_201_CREATED)
def upload_attachment(
    file: UploadFile = File(...),
    storage: AttachmentStorage = Depends(get_storage),
    current_student: Student = Depends(get_current_student),
):
    """Store an attachment and return the URL to pass as a fileUrls entry."""
    if not storage.enabled:
        raise HTTPException(status_code=503, detail="Object storage is not configured")
    try:
        url = storage.upload(file.file, file.filename, file.content_type)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"url": url}
