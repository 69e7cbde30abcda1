"""Redirect route for following short links."""

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from ...service import OpenStatus
from ...shortcode import ShortCodeGenerator

router = APIRouter()


@router.get("/{code}", include_in_schema=False)
def redirect_to_url(request: Request, code: str):
    """Redirect to the original URL, counting one click."""
    if not ShortCodeGenerator.is_valid_format(code):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{code}' not found",
        )

    result = request.app.state.service.resolve(code)

    if result.status == OpenStatus.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{code}' not found",
        )

    if result.status == OpenStatus.EXPIRED:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=f"Short code '{code}' has expired",
        )

    if result.status == OpenStatus.DEPLETED:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=f"Short code '{code}' has no clicks left",
        )

    # 302 so every visit comes back through the click counter
    return RedirectResponse(url=result.url, status_code=status.HTTP_302_FOUND)
