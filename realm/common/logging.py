import logging
import sys
import structlog


def configure_logging(log_level: str = "INFO", json_format: bool = True):
    """
    Set up structlog and stdlib logging for the realm process.

    Every event goes to stderr; stdout belongs to the MCP stdio stream.

    Args:
        log_level: Name of the minimum level, e.g. "INFO" or "DEBUG"
        json_format: One JSON object per event when True, console rendering otherwise
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
