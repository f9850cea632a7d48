"""HTTP surface: three read endpoints over an :class:`~ecb_rates.EcbRates` facade."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from ecb_rates import EcbRates
from ecb_rates.exceptions import EcbRatesError, NotFoundError
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": str(exc)},
    )


def store_error_handler(request: Request, exc: EcbRatesError) -> JSONResponse:
    LOGGER.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def create_app(rates: EcbRates) -> FastAPI:
    """Application factory.

    ``rates`` is the already-seeded facade; handlers only read from it.
    """

    app = FastAPI(title="ECB reference rates", version=rates.__version__)
    app.state.rates = rates

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(EcbRatesError, store_error_handler)

    # Registered before ``/rates/{rate_date}`` so the literal paths win.
    @app.get("/rates/latest", summary="Latest daily rates")
    def latest_rates() -> Dict[str, Any]:
        return rates.latest_payload()

    @app.get("/rates/analyze", summary="Min/max/avg per currency across all dates")
    def analyze_rates() -> Dict[str, Any]:
        return rates.analysis_payload()

    @app.get("/rates/{rate_date}", summary="Rates published on a given date")
    def rates_for_date(rate_date: str) -> Dict[str, Any]:
        return rates.rate_payload(rate_date)

    return app
