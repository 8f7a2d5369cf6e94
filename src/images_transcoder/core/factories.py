"""Factory classes for creating configured pipeline instances."""

from typing import Any, Dict, Optional, TextIO

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .image_utils import PathLike
from .logging_config import get_logger
from .models import PipelineConfig
from .observability import MetricsCollector
from .protocols import LoggerProtocol
from .services import UnitOfWorkOrchestrator
from .shutdown import ShutdownCoordinator, get_shutdown_coordinator


def build_config(**values: Any) -> PipelineConfig:
    """
    Validate raw option values into a PipelineConfig.

    Options left as None fall back to the model defaults.

    Raises:
        ConfigurationError: If a value is out of range or unsupported
    """
    provided: Dict[str, Any] = {k: v for k, v in values.items() if v is not None}
    try:
        return PipelineConfig(**provided)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e


class PipelineFactory:
    """Factory for creating the complete transcoding pipeline."""

    @staticmethod
    def create_orchestrator(
        config: PipelineConfig,
        output_root: PathLike,
        concurrency: Optional[int] = None,
        coordinator: Optional[ShutdownCoordinator] = None,
        logger: Optional[LoggerProtocol] = None,
        show_progress: bool = True,
        progress_stream: Optional[TextIO] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> UnitOfWorkOrchestrator:
        """Create an orchestrator wired to the process-wide shutdown coordinator."""

        if coordinator is None:
            coordinator = get_shutdown_coordinator()

        if logger is None:
            logger = get_logger("orchestrator")

        if metrics_collector is None:
            metrics_collector = MetricsCollector()

        return UnitOfWorkOrchestrator(
            config=config,
            output_root=output_root,
            concurrency=concurrency,
            coordinator=coordinator,
            logger=logger,
            show_progress=show_progress,
            progress_stream=progress_stream,
            metrics_collector=metrics_collector,
        )
