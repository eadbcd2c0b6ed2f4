from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ats.services.file_store import FileStore, get_file_store

router = APIRouter()


@router.get("/{name}")
async def get_upload(name: str, files: FileStore = Depends(get_file_store)):
    stored = files.open(name)
    if stored.inline:
        return FileResponse(
            stored.path,
            media_type=stored.content_type,
            filename=stored.name,
            content_disposition_type="inline",
        )
    return FileResponse(stored.path, media_type=stored.content_type)
