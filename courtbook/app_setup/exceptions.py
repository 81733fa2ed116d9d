"""
Gestionnaires d'exceptions.
- CourtBookError (et sous-classes): code HTTP porté par l'exception, corps {"detail", "reason", ...}.
- Erreurs de validation FastAPI: 400 avec reason="invalid_request" (contrat API homogène).
- HTTPException: réponse JSON FastAPI standard.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from courtbook.errors import CourtBookError, SignatureMismatch

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """Enregistre les handlers métier, validation et HTTP."""

    @app.exception_handler(CourtBookError)
    async def courtbook_error(request: Request, exc: CourtBookError):
        if isinstance(exc, SignatureMismatch):
            logger.warning("security: %s path=%s", exc.reason, request.url.path)
        elif exc.status_code >= 500:
            logger.error("%s path=%s reason=%s", type(exc).__name__, request.url.path, exc.reason)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Requête invalide",
                "reason": "invalid_request",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
