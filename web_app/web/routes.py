"""Public redirect route."""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import RedirectResponse

from tinylink.errors import NotFoundError, StorageUnavailableError
from ..errors import internal_error, unavailable

router = APIRouter()


@router.get("/{code}", include_in_schema=False)
async def redirect_to_destination(request: Request, code: str):
    """Redirect to the destination URL, counting the visit."""
    service = request.app.state.service
    
    try:
        destination = await service.resolve(code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError:
        raise unavailable()
    except Exception as e:
        raise internal_error(f"resolving {code}", e)
    
    # 302 so every visit reaches the server and is counted
    return RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)
