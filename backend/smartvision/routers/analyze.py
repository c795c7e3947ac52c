import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from smartvision.core.clients import Clients
from smartvision.deps.clients import get_clients
from smartvision.services.analysis_service import analyze_image
from smartvision.services.upload_service import upload_image
from smartvision.utils.file_validation import validate_image


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])

IMAGE_FIELD = "image"
MSG_NO_FILE = "No image file uploaded."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/analyze")
async def analyze(request: Request, clients: Clients = Depends(get_clients)):
    """
    Captions, tags and OCRs the image sent as the multipart ``image`` field,
    then stores it in blob storage.
    The image is only uploaded once the analysis has succeeded.
    """
    try:
        form = await request.form()
    except HTTPException as e:
        return _error(400, str(e.detail))

    # A plain text part under the field name counts as no file.
    image = form.get(IMAGE_FIELD)
    if not isinstance(image, UploadFile):
        return _error(400, MSG_NO_FILE)

    data = await image.read()
    ok, msg = validate_image(len(data))
    if not ok:
        return _error(400, msg)

    logger.info("Analyzing a new image: %s", image.filename)
    try:
        vision, storage = clients.require_vision(), clients.require_storage()
        analysis = await analyze_image(vision, data, clients.poller, clients.ocr_language)
        image_url = await upload_image(storage, data, image.filename, image.content_type)
    except Exception as e:
        logger.exception("Analysis Error")
        return _error(500, str(e) or "Analysis failed")

    return {"success": True, "analysis": analysis.to_dict(), "imageUrl": image_url}
