"""MyAnimeList XML import endpoint."""

from fastapi import APIRouter, Depends, Request

from animelog.api.dependencies import get_import_service
from animelog.api.schemas import MessageResponse
from animelog.application.services.mal_import_service import MalImportService

router = APIRouter(tags=["import"])


# The body is the raw XML file, not JSON - the UI posts the file content as-is.
@router.post("/import")
async def import_mal_export(
    request: Request,
    import_service: MalImportService = Depends(get_import_service),
) -> MessageResponse:
    """Merge a MyAnimeList export into the list. Covers are left to the backfill."""
    body = await request.body()
    result = await import_service.import_xml(body.decode("utf-8", errors="replace"))
    return MessageResponse(message=result.message)
