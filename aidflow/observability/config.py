# SPDX-License-Identifier: Apache-2.0

"""
OpenTelemetry Configuration

Sets up tracing and logging for processes that embed the workflow engine.
The engine itself only creates spans and log records; the host process
decides where they go by calling ``setup_observability`` once at start.
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from ..settings import Settings

logger = logging.getLogger(__name__)

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}


def setup_observability(settings: Optional[Settings] = None, install: bool = True) -> Optional[TracerProvider]:
    """
    Initialize OpenTelemetry tracing based on settings.
    
    Args:
        settings: Runtime settings, read from the environment when omitted
        install: Register the provider globally; tests pass False
        
    Returns:
        The configured TracerProvider, or None when tracing is disabled
    """
    settings = settings or Settings.from_env()
    environment = settings.environment
    
    if not settings.otel_enabled:
        # Spans stay no-ops without a tracer provider
        setup_structured_logging(environment)
        return None
    
    # Environment-specific sampling, full sampling outside production and staging
    sampler = TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0))
    
    resource = Resource.create({
        "service.name": settings.service_name,
        "service.version": settings.service_version,
        "deployment.environment": environment
    })
    
    tracer_provider = TracerProvider(
        sampler=sampler,
        resource=resource
    )
    
    if settings.otel_exporter_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_endpoint)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(otlp_exporter, max_export_batch_size=512)
        )
    elif environment == 'development':
        # Development: console output when no collector is configured
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    
    if install:
        trace.set_tracer_provider(tracer_provider)
    
    setup_structured_logging(environment)
    
    logger.info(
        "Observability configured",
        extra={
            "environment": environment,
            "otlp_endpoint": settings.otel_exporter_endpoint,
            "sampling_ratio": SAMPLING_RATIOS.get(environment, 1.0)
        }
    )
    
    return tracer_provider


def setup_structured_logging(environment: str) -> int:
    """
    Configure root logging for the environment.
    
    Returns:
        The log level applied to the workflow loggers
    """
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG
    }.get(environment, logging.INFO)
    
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )
    
    logging.getLogger('aidflow').setLevel(log_level)
    
    return log_level
