"""API routes implementation."""

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Request, HTTPException, Response, status

from .schemas import (
    CreateLinkRequest,
    LinkResponse,
    HealthResponse,
    ErrorResponse,
)
from tinylink.common.headers import build_base_url, resolve_path_prefix
from tinylink.common.url_builder import build_short_url
from tinylink.database.models import Link
from tinylink.errors import (
    AllocationExhaustedError,
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..errors import internal_error, unavailable

router = APIRouter()

UNAVAILABLE_RESPONSE = {"model": ErrorResponse, "description": "Storage temporarily unavailable"}


def _link_response(request: Request, link: Link) -> LinkResponse:
    """Build the API representation of a link, including its short URL."""
    config = request.app.state.config
    headers = dict(request.headers)

    base_url = build_base_url(
        headers=headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    short_url = build_short_url(
        code=link.code,
        base_url=base_url,
        path_prefix=resolve_path_prefix(headers, config.path_prefix),
    )

    return LinkResponse(
        code=link.code,
        url=link.destination_url,
        email=link.owner_email,
        total_clicks=link.total_clicks,
        last_clicked=link.last_clicked_at,
        created_at=link.created_at,
        short_url=short_url,
    )


@router.post(
    "/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        503: UNAVAILABLE_RESPONSE,
    },
    summary="Create short link",
    description="Create a short link. Optionally provide a custom short code.",
)
async def create_link(request: Request, body: CreateLinkRequest):
    """Create a short link."""
    service = request.app.state.service

    try:
        link = await service.create_link(
            destination_url=body.url,
            owner_email=body.email,
            code=body.code,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AllocationExhaustedError:
        raise unavailable("Could not allocate a short code, please retry")
    except StorageUnavailableError:
        raise unavailable()
    except Exception as e:
        raise internal_error("creating link", e)

    return _link_response(request, link)


@router.get(
    "/links",
    response_model=List[LinkResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email"},
        503: UNAVAILABLE_RESPONSE,
    },
    summary="List links by owner",
    description="List the links created by an email address, newest first.",
)
async def list_links(request: Request, email: str = ""):
    """List links owned by an email address."""
    service = request.app.state.service

    try:
        links = await service.list_links(email)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageUnavailableError:
        raise unavailable()
    except Exception as e:
        raise internal_error("listing links", e)

    return [_link_response(request, link) for link in links]


@router.get(
    "/links/{code}",
    response_model=LinkResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
        503: UNAVAILABLE_RESPONSE,
    },
    summary="Get link",
    description="Get a link including its click statistics. Does not count as a visit.",
)
async def get_link(request: Request, code: str):
    """Get information about a link."""
    service = request.app.state.service

    try:
        link = await service.get_link(code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError:
        raise unavailable()
    except Exception as e:
        raise internal_error("reading link", e)

    return _link_response(request, link)


@router.delete(
    "/links/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
        503: UNAVAILABLE_RESPONSE,
    },
    summary="Delete link",
)
async def delete_link(request: Request, code: str):
    """Delete a link."""
    service = request.app.state.service

    try:
        await service.delete_link(code)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError:
        raise unavailable()
    except Exception as e:
        raise internal_error("deleting link", e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its store are healthy.",
)
async def health_check(request: Request, response: Response):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()
    if not health["overall"]:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        store=service.store.name,
        timestamp=datetime.now(timezone.utc),
    )
