import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .gateway import GenerationGateway
from .schemas import ErrorResponse, GenerateRequest, GenerateResponse, HealthResponse
from .settings import GatewaySettings

logger = logging.getLogger(__name__)

INVALID_PROMPT_MESSAGE = "prompt is required"


def create_app(gateway: Optional[GenerationGateway] = None) -> FastAPI:
    if gateway is None:
        gateway = GenerationGateway(GatewaySettings.from_env())
    settings = gateway.settings

    app = FastAPI(title="SNS Writer API", version="1.0.0")
    app.state.gateway = gateway

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected generation request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": INVALID_PROMPT_MESSAGE})

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        return HealthResponse(status="ok", mock=settings.use_mock, model=settings.model)

    @app.post(
        "/api/generate",
        response_model=GenerateResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def generate_text(payload: GenerateRequest):
        result = gateway.generate(payload.prompt)
        if not result.ok:
            logger.warning("Generation failed (%d): %s", result.status_code, result.error.message)
        return JSONResponse(status_code=result.status_code, content=result.to_payload())

    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    host = os.getenv("SNS_WRITER_HOST", "0.0.0.0")
    port = int(os.getenv("SNS_WRITER_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
