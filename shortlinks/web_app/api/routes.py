"""API routes implementation."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response, status

from .schemas import (
    CreateLinkRequest,
    EditLinkRequest,
    LinkResponse,
    LinkListResponse,
    HealthResponse,
    ErrorResponse,
)
from ...database.models import ShortLink
from ...errors import ExhaustedCodeSpace, InvalidArgument, InvalidUrl
from ...shortcode import ShortCodeGenerator

router = APIRouter()


def _to_response(request: Request, link: ShortLink) -> LinkResponse:
    service = request.app.state.service
    config = request.app.state.config
    return LinkResponse(
        code=link.code,
        short_url=f"{config.base_url.rstrip('/')}/{link.code}",
        original_url=link.original_url,
        owner_id=link.owner_id,
        created_at=datetime.fromtimestamp(link.created_at, tz=timezone.utc),
        ttl_seconds=link.ttl,
        max_clicks=link.max_clicks,
        click_count=link.click_count,
        remaining_ttl_seconds=service.remaining_ttl(link),
    )


def _require_owner(owner_id: Optional[str]) -> str:
    if not owner_id or not owner_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Owner-Id header is required",
        )
    return owner_id.strip()


def _owned_link(request: Request, code: str, owner_id: str) -> ShortLink:
    """Fetch a link for mutation, mapping absence and ownership to HTTP errors."""
    link = request.app.state.service.info(code)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{code}' not found",
        )
    if link.owner_id != owner_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Short code '{code}' belongs to another owner",
        )
    return link


@router.post(
    "/links",
    response_model=LinkResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        503: {"model": ErrorResponse, "description": "No free short code"},
    },
    summary="Create short link",
)
def create_link(
    request: Request,
    body: CreateLinkRequest,
    x_owner_id: Optional[str] = Header(None),
):
    """Create a short link owned by the caller."""
    service = request.app.state.service
    config = request.app.state.config
    owner_id = _require_owner(x_owner_id)

    max_clicks = config.default_max_clicks if body.max_clicks is None else body.max_clicks
    ttl_seconds = config.default_ttl_seconds if body.ttl_seconds is None else body.ttl_seconds

    try:
        link = service.create(owner_id, body.url, max_clicks, ttl_seconds)
    except (InvalidUrl, InvalidArgument) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ExhaustedCodeSpace as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return _to_response(request, link)


@router.get(
    "/links",
    response_model=LinkListResponse,
    summary="List short links",
)
def list_links(request: Request, owner: Optional[str] = None):
    """List all links, or only those of one owner."""
    links = request.app.state.service.list_links(owner)
    return LinkListResponse(
        count=len(links),
        links=[_to_response(request, link) for link in links],
    )


@router.get(
    "/links/{code}",
    response_model=LinkResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get short link information",
)
def get_link(request: Request, code: str):
    """Get link details without counting a click."""
    link = None
    if ShortCodeGenerator.is_valid_format(code):
        link = request.app.state.service.info(code)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{code}' not found",
        )
    return _to_response(request, link)


@router.patch(
    "/links/{code}",
    response_model=LinkResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        403: {"model": ErrorResponse, "description": "Not the owner"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Edit click limit and/or TTL",
)
def edit_link(
    request: Request,
    code: str,
    body: EditLinkRequest,
    x_owner_id: Optional[str] = Header(None),
):
    """Change the click budget and/or TTL of a link owned by the caller."""
    service = request.app.state.service
    owner_id = _require_owner(x_owner_id)

    if body.max_clicks is None and body.ttl_seconds is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to change: provide max_clicks and/or ttl_seconds",
        )
    for value in (body.max_clicks, body.ttl_seconds):
        if value is not None and value < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Limits must be non-negative",
            )

    not_found = HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Short code '{code}' not found")

    # Both edits and the read-back happen without a sweep in between
    with service.lock:
        _owned_link(request, code, owner_id)

        if body.max_clicks is not None and not service.edit_limit(code, owner_id, body.max_clicks):
            raise not_found
        if body.ttl_seconds is not None and not service.edit_ttl(code, owner_id, body.ttl_seconds):
            raise not_found

        link = service.info(code)

    if link is None:
        raise not_found
    return _to_response(request, link)


@router.delete(
    "/links/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"model": ErrorResponse, "description": "Not the owner"},
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Delete short link",
)
def delete_link(
    request: Request,
    code: str,
    x_owner_id: Optional[str] = Header(None),
):
    """Delete a link owned by the caller."""
    owner_id = _require_owner(x_owner_id)
    _owned_link(request, code, owner_id)

    if not request.app.state.service.delete(code, owner_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Short code '{code}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
def health_check(request: Request):
    """Health check endpoint for monitoring."""
    reaper = request.app.state.reaper
    if reaper is None:
        reaper_status = "disabled"
    else:
        reaper_status = "running" if reaper.is_alive() else "stopped"

    store = request.app.state.store
    persistence = "ok" if store.last_error is None else str(store.last_error)
    healthy = reaper_status != "stopped" and store.last_error is None

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        links=len(store),
        reaper=reaper_status,
        persistence=persistence,
        timestamp=datetime.now(timezone.utc),
    )
