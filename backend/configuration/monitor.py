import logging
from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from backend.configuration.config import Config

logger = logging.getLogger("tutorschedule")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(handler)
logger.setLevel(Config.LOG_LEVEL)

resource = Resource(attributes={
    SERVICE_NAME: "tutorschedulebackend"
})

def setup_tracing():
    """
    Install the tracer provider. Spans go to Application Insights only when a
    connection string is configured; otherwise they stay in process.
    """
    try:
        trace_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(trace_provider)

        if Config.APPLICATIONINSIGHTS_CONNECTION_STRING:
            trace_provider.add_span_processor(BatchSpanProcessor(
                AzureMonitorTraceExporter(connection_string=Config.APPLICATIONINSIGHTS_CONNECTION_STRING)
            ))
            logger.info("Exporting traces to Application Insights")
        else:
            logger.info("Application Insights not configured, spans stay local")

        # The editor saves through httpx
        HTTPXClientInstrumentor().instrument()
    except Exception as e:
        logger.error(f"Failed to set up tracing: {str(e)}")
    return trace.get_tracer("tutorschedule")

tracer = setup_tracing()

def instrument_fastapi(app):
    try:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI app instrumented")
    except Exception as e:
        logger.error(f"Failed to instrument FastAPI app: {str(e)}")

def start_span(name, attributes=None):
    """Context manager for a span around one service operation."""
    return tracer.start_as_current_span(name, attributes=attributes)

def _set_properties(span, properties):
    for key, value in (properties or {}).items():
        span.set_attribute(key, str(value))

def log_event(event_name, properties=None):
    """Record a named event as a span and a log line."""
    try:
        with tracer.start_as_current_span(event_name) as span:
            _set_properties(span, properties)
        logger.info(f"Event: {event_name}", extra={"custom_properties": properties})
    except Exception as e:
        logger.error(f"Failed to log event '{event_name}': {str(e)}")

def log_exception(exception, properties=None):
    """Record a failure on an error span and log it with its traceback."""
    try:
        with tracer.start_as_current_span("exception") as span:
            span.record_exception(exception)
            _set_properties(span, properties)
            span.set_status(trace.StatusCode.ERROR, str(exception))
        logger.error(f"Exception: {str(exception)}", exc_info=exception,
                     extra={"custom_properties": properties})
    except Exception as e:
        logger.error(f"Failed to log exception: {str(e)}")

def log_metric(metric_name, value, properties=None):
    try:
        with tracer.start_as_current_span(f"metric:{metric_name}") as span:
            span.set_attribute("metric.value", value)
            _set_properties(span, properties)
        logger.info(f"Metric: {metric_name}={value}", extra={"custom_properties": properties})
    except Exception as e:
        logger.error(f"Failed to log metric '{metric_name}': {str(e)}")

def bind_context(fn):
    """
    Wrap fn so it runs under the caller's trace context, for work handed to
    another thread.
    """
    parent = otel_context.get_current()

    def run(*args, **kwargs):
        token = otel_context.attach(parent)
        try:
            return fn(*args, **kwargs)
        finally:
            otel_context.detach(token)
    return run
