import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.security import TokenData, verify_token
from app.storage.oss import StorageError, upload_bytes

router = APIRouter()
logger = logging.getLogger("devconnect.upload")


@router.post("/upload", status_code=201)
async def upload_file(
    image: UploadFile | None = File(None),
    metadata: TokenData = Depends(verify_token),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        url = await upload_bytes(
            await image.read(),
            image.filename,
            category="uploads",
            user_id=metadata.id,
            content_type=image.content_type,
        )
    except StorageError:
        raise HTTPException(status_code=500, detail="Upload failed")
    logger.info("User %s uploaded %s", metadata.id, url)
    return {"message": "Image uploaded successfully", "url": url}
