"""
Server component for dashmath.

This module provides a FastAPI server exposing the analysis engine to
the dashboard front end as JSON.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import fastapi
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import uvicorn

from dashmath import __version__
from dashmath.components.config import Config, ConfigManager
from dashmath.dataset import DatasetManager
from dashmath.math.classifiers import make_classifier
from dashmath.math.density import gaussian_pdf_2d
from dashmath.math.metrics import calculate_metrics
from dashmath.math.pca import project, run_pca
from dashmath.utils.general import to_jsonable
from dashmath.utils.errors import DashmathError

# Set up logging
logger = logging.getLogger(__name__)


# Define API models
class DatasetRequest(BaseModel):
    """Dataset upload model (one record per row)."""

    records: List[Dict[str, Any]]
    target: Optional[str] = None


class AnalysisRequest(BaseModel):
    """Dataset analysis request model."""

    features: Optional[List[str]] = None
    target: Optional[str] = None
    model: Optional[str] = None
    normalize: Optional[bool] = None


class PCARequest(BaseModel):
    """PCA request model."""

    matrix: List[List[float]]
    components: int = 3


class ClassifyRequest(BaseModel):
    """Classification request model."""

    matrix: List[List[float]]
    labels: List[str]
    model: str = 'bayes'
    test_matrix: Optional[List[List[float]]] = None


class MetricsRequest(BaseModel):
    """Metrics request model."""

    actual: List[str]
    predicted: List[str]


class DensityRequest(BaseModel):
    """Bivariate density request model."""

    points: List[List[float]]
    mean: List[float]
    cov: List[List[float]]


class Server:
    """
    FastAPI server for dashmath.
    """

    def __init__(self,
                 dataset_manager: DatasetManager,
                 config: Optional[Config] = None):
        """
        Initialize a server.

        Args:
            dataset_manager: Dataset manager
            config: Configuration for the server
        """
        self.dataset_manager = dataset_manager
        self.config = config or ConfigManager.get_config()

        # Create FastAPI app
        self.app = FastAPI(
            title="Dashmath API",
            description="Classification, PCA and density analysis for tabular datasets",
            version=__version__
        )

        # Set up CORS
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()
        self._setup_validation()
        self._setup_error_handling()

        # Server status
        self._running = False
        self._server_thread = None
        self._uvicorn = None

    def _setup_routes(self) -> None:
        """
        Set up API routes.
        """
        manager = self.dataset_manager
        config = self.config

        # Health check
        @self.app.get("/health")
        async def health_check():
            return {"status": "ok"}

        # List datasets
        @self.app.get("/api/v1/datasets")
        def list_datasets():
            return to_jsonable(manager.get_summary())

        # Register or replace a dataset
        @self.app.post("/api/v1/datasets/{name}")
        def register_dataset(name: str, request: DatasetRequest):
            dataset = manager.register(name, request.records, request.target)
            return to_jsonable(dataset.get_summary())

        # Remove a dataset
        @self.app.delete("/api/v1/datasets/{name}")
        def remove_dataset(name: str):
            if not manager.remove(name):
                raise HTTPException(status_code=404, detail="Dataset not found")
            return {"status": "removed", "name": name}

        # Full analysis of a dataset
        @self.app.post("/api/v1/datasets/{name}/analysis")
        def analyze_dataset(name: str, request: AnalysisRequest):
            if manager.get_dataset(name) is None:
                raise HTTPException(status_code=404, detail="Dataset not found")

            result = manager.analyze(
                name,
                features=request.features,
                target=request.target,
                model=request.model,
                normalize=request.normalize
            )
            return to_jsonable(result)

        # PCA on a raw matrix
        @self.app.post("/api/v1/pca")
        def pca(request: PCARequest):
            result = run_pca(
                request.matrix,
                max_iterations=config.get('pca.max-iterations', 100),
                tol=config.get('pca.tolerance', 1e-9)
            )
            result['projections'] = project(request.matrix, result['eigenvectors'], request.components)
            return to_jsonable(result)

        # Fit a classifier and predict
        @self.app.post("/api/v1/classify")
        def classify(request: ClassifyRequest):
            clf = make_classifier(request.model)
            clf.fit(request.matrix, request.labels)

            if request.test_matrix is None:
                predictions = clf.predict(request.matrix)
                return {
                    "predictions": predictions,
                    "metrics": to_jsonable(calculate_metrics(request.labels, predictions))
                }

            return {"predictions": clf.predict(request.test_matrix)}

        # Metrics from label vectors
        @self.app.post("/api/v1/metrics")
        def metrics(request: MetricsRequest):
            return to_jsonable(calculate_metrics(request.actual, request.predicted))

        # Bivariate Gaussian density
        @self.app.post("/api/v1/density")
        def density(request: DensityRequest):
            return {
                "densities": [gaussian_pdf_2d(point, request.mean, request.cov)
                              for point in request.points]
            }

    def _setup_validation(self) -> None:
        """
        Set up request validation.
        """
        @self.app.exception_handler(fastapi.exceptions.RequestValidationError)
        async def validation_exception_handler(request, exc):
            return JSONResponse(
                status_code=422,
                content={"detail": str(exc)}
            )

    def _setup_error_handling(self) -> None:
        """
        Set up error handling.
        """
        @self.app.exception_handler(DashmathError)
        async def dashmath_exception_handler(request, exc):
            return JSONResponse(
                status_code=400,
                content={"detail": str(exc)}
            )

        @self.app.exception_handler(Exception)
        async def generic_exception_handler(request, exc):
            logger.exception("Unhandled exception")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"}
            )

    @property
    def running(self) -> bool:
        """Whether the server thread is alive."""
        return self._server_thread is not None and self._server_thread.is_alive()

    def start(self, timeout: float = 10.0) -> None:
        """
        Start the server in a background thread.

        Args:
            timeout: Seconds to wait for uvicorn to finish starting up
        """
        if self._running:
            return

        port = self.config.get('server.port', 8080)
        host = self.config.get('server.host', 'localhost')

        # uvicorn spells the level "warning"
        log_level = self.config.get('logging.level', 'info')
        if log_level == 'warn':
            log_level = 'warning'

        self._uvicorn = uvicorn.Server(uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level=log_level
        ))

        self._server_thread = threading.Thread(
            target=self._uvicorn.run,
            name='dashmath-server',
            daemon=True
        )
        self._server_thread.start()
        self._running = True

        deadline = time.monotonic() + timeout
        while not self._uvicorn.started and self._server_thread.is_alive():
            if time.monotonic() > deadline:
                logger.warning(f"Server did not report startup within {timeout}s")
                break
            time.sleep(0.05)

        logger.info(f"Server started at http://{host}:{port}")

    def stop(self, timeout: float = 10.0) -> None:
        """
        Stop the server and wait for its thread to exit.

        Args:
            timeout: Seconds to wait for the server thread
        """
        if not self._running:
            return

        self._uvicorn.should_exit = True
        self._server_thread.join(timeout)
        if self._server_thread.is_alive():
            logger.warning(f"Server thread still running after {timeout}s")

        self._running = False

        logger.info("Server stopped")
