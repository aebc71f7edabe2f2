import logging
import os
import opentelemetry.trace
from azure.monitor.opentelemetry import configure_azure_monitor

# Only export to Application Insights when running inside Azure Functions
if os.environ.get("FUNCTIONS_WORKER_RUNTIME"):
    try:
        configure_azure_monitor()
        logging.info("Azure Monitor OpenTelemetry configured successfully")
    except Exception as e:
        logging.error(f"Error configuring Azure Monitor: {str(e)}")

# Tracer shared by routes and crud (distributed tracing)
tracer = opentelemetry.trace.get_tracer("products_api")

logger = logging.getLogger("products_api")
logger.setLevel(logging.INFO)

if not logger.handlers:
    # Console handler for local development and Azure Functions console
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)


def set_log_level(level: str) -> None:
    """Apply the configured level to the package logger."""
    logger.setLevel(level)


def get_child_logger(name):
    """Get a child logger with the given name."""
    return logger.getChild(name)
