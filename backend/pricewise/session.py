"""Application-session catalog: one CatalogClient per process."""
from fastapi import HTTPException, Request

from pricewise.exceptions import ConflictError, GatewayError, NotFoundError
from pricewise.services.catalog import CatalogClient


def get_catalog(request: Request) -> CatalogClient:
    """Dependency for the session-wide catalog client."""
    return request.app.state.catalog


def http_error(e: GatewayError) -> HTTPException:
    """Translate a gateway failure into the HTTP error shown to the caller."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=502, detail=f"Remote store error: {e}")
