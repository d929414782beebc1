import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from .config import Settings
from .errors import (CropYieldError, EncodingError, ModelNotReadyError,
                     ValidationError)
from .serving.model_manager import ModelManager
from .serving.prediction_service import predict
from .training.training_engine import run_training

settings = Settings.from_env()

# --- Logging Configuration ---
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - [%(levelname)s] - %(name)s - %(message)s',
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger("crop_yield_api")

STATIC_DIR = Path(__file__).parent / "static"

ERROR_STATUS = {
    ModelNotReadyError: 503,
    ValidationError: 400,
    EncodingError: 400,
}

# --- API Lifespan Management ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    manager: ModelManager = app.state.model_manager
    cfg: Settings = app.state.settings
    logger.info("--- Starting Crop Yield Prediction Engine ---")
    try:
        # Train strictly before accepting traffic
        await run_in_threadpool(run_training, cfg.data_path, manager, cfg.trainer)
        logger.info(f"--- Crop Yield API is READY on port {cfg.port} ---")
    except CropYieldError as e:
        logger.critical(f"Fatal Startup Error [{e.kind}]: {e.message}")
        raise
    yield
    manager.clear()
    logger.info("Shutting down...")

# --- Pydantic Schemas ---

class PredictRequest(BaseModel):
    inputs: Dict[str, Any] = Field(..., examples=[{"Crop_Type": "Wheat", "Rainfall": "120"}])

class PredictResponse(BaseModel):
    predictedYield: str

class ErrorResponse(BaseModel):
    kind: str
    message: str

# --- Error Handlers ---

async def pipeline_error_handler(request: Request, exc: CropYieldError):
    status = ERROR_STATUS.get(type(exc), 500)
    if status >= 500:
        logger.error(f"Request failed [{exc.kind}]: {exc.message}")
    return JSONResponse(status_code=status, content=exc.to_dict())

async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"kind": ValidationError.__name__, "message": f"Malformed request body ({details})"},
    )

async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"kind": "InternalError", "message": "Internal server error"},
    )

# --- Application Definition ---

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(
        title="Crop Yield Prediction API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.model_manager = ModelManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CropYieldError, pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # --- API Endpoints ---

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/health")
    async def health_check(request: Request) -> Dict[str, Any]:
        """Exposes model lifecycle state and training diagnostics."""
        manager: ModelManager = request.app.state.model_manager
        snapshot = manager.peek()
        payload: Dict[str, Any] = {"status": "healthy", "model_state": manager.state}
        if snapshot is not None:
            payload["model_version"] = snapshot.version
            payload["trained_at"] = snapshot.trained_at.isoformat()
            payload["schema"] = snapshot.profile.to_dict()
            if snapshot.summary is not None:
                payload["training"] = snapshot.summary.to_dict()
        return payload

    @app.post(
        "/predict",
        response_model=PredictResponse,
        responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
        tags=["Prediction"],
    )
    async def predict_yield(payload: PredictRequest, request: Request):
        manager: ModelManager = request.app.state.model_manager
        # Offload inference to maintain event-loop responsiveness
        result = await run_in_threadpool(predict, payload.inputs, manager)
        return PredictResponse(**result)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    # Single worker: the trained model lives in this process's memory
    uvicorn.run("cropyield.main:app", host=settings.host, port=settings.port, workers=1)
