"""
FastAPI application exposing the R4R endpoints.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.config import settings
from ..core.constants import ErrorConstants, NetworkConstants
from ..core.errors import InsufficientDataError, UpstreamUnavailableError
from ..core.scoring import load_weights, set_weights
from ..services.r4r_analyzer import R4RAnalyzer

logger = logging.getLogger(__name__)


class NetworkAnalysisRequest(BaseModel):
    userkeys: List[str] = Field(
        ...,
        min_length=NetworkConstants.MIN_USERKEYS,
        max_length=NetworkConstants.MAX_USERKEYS,
        description="Userkeys to analyze together",
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _upstream_error(userkey: str, e: Exception) -> JSONResponse:
    logger.error(f"Upstream failure analyzing {userkey}: {e}")
    return _error(503, ErrorConstants.UPSTREAM_ERROR_MESSAGE)


def _internal_error(userkey: str, e: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error analyzing {userkey}: {e}")
    return _error(500, "Internal server error")


def create_app(analyzer: Optional[R4RAnalyzer] = None) -> FastAPI:
    """Build the API around an analyzer (a live Ethos-backed one by default)."""
    app = FastAPI(
        title="EthosRadar R4R API",
        version="1.0.0",
        description="Review-for-review farming detection over the Ethos API",
    )
    if analyzer is None:
        set_weights(load_weights(settings.weights_file))
        analyzer = R4RAnalyzer()
    app.state.analyzer = analyzer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_analyzer(request: Request) -> R4RAnalyzer:
        return request.app.state.analyzer

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "as_of": datetime.now(timezone.utc).isoformat(),
            "service": "ethosradar-r4r-api",
        }

    @app.get("/api/r4r-analysis/{userkey}")
    def r4r_analysis(userkey: str, request: Request):
        """Full R4R analysis for one userkey."""
        analyzer = get_analyzer(request)
        cached = analyzer.is_cached(userkey)
        try:
            analysis = analyzer.analyze_user(userkey)
        except InsufficientDataError:
            return _error(404, ErrorConstants.INSUFFICIENT_DATA_MESSAGE)
        except UpstreamUnavailableError as e:
            return _upstream_error(userkey, e)
        except Exception as e:
            return _internal_error(userkey, e)

        body = {"success": True, "data": analysis.to_dict()}
        if cached:
            body["cached"] = True
        return body

    @app.get("/api/r4r-summary/{userkey}")
    def r4r_summary(userkey: str, request: Request):
        """Lightweight summary for dashboard use."""
        try:
            summary = get_analyzer(request).get_summary(userkey)
        except UpstreamUnavailableError as e:
            return _upstream_error(userkey, e)
        except Exception as e:
            return _internal_error(userkey, e)
        return {"success": True, "data": summary.to_dict()}

    @app.get("/api/review-summary/{userkey}")
    def review_summary(userkey: str, request: Request):
        """Received-review sentiment only."""
        try:
            summary = get_analyzer(request).get_summary(userkey)
        except UpstreamUnavailableError as e:
            return _upstream_error(userkey, e)
        except Exception as e:
            return _internal_error(userkey, e)
        return {
            "success": True,
            "data": {
                "totalReviews": summary.total_reviews,
                "positivePercentage": summary.positive_percentage,
            },
        }

    @app.post("/api/r4r-network-analysis")
    def r4r_network_analysis(payload: NetworkAnalysisRequest, request: Request):
        """Analyze several users and the reciprocal links between them."""
        label = ",".join(payload.userkeys)
        try:
            result = get_analyzer(request).analyze_network(payload.userkeys)
        except ValueError as e:
            return _error(400, str(e))
        except UpstreamUnavailableError as e:
            return _upstream_error(label, e)
        except Exception as e:
            return _internal_error(label, e)
        return {"success": True, "data": result.to_dict()}

    return app
