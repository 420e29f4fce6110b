import logging
import logging.handlers
import sys
from pathlib import Path
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter used by the file handlers.

    Every entry gets the timestamp, level, logger name, source location and
    the id of the request it was emitted under (or "-" outside a request).
    """
    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['timestamp'] = record.created
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['request_id'] = getattr(record, 'request_id', '-')


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Configure application-wide logging.

    Console output is human readable and honours ``log_level``. Two rotating
    JSON files are written under ``log_dir``: ``app.log`` with everything and
    ``error.log`` with ERROR and above.

    Args:
        log_level: Minimum console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory where log files will be stored
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    json_formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(logger)s %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_path / "app.log", logging.DEBUG, json_formatter))
    root_logger.addHandler(_rotating_handler(log_path / "error.log", logging.ERROR, json_formatter))

    for noisy in ("uvicorn", "uvicorn.access", "uvicorn.error", "sqlalchemy.engine",
                  "passlib", "passlib.handlers.bcrypt", "slowapi"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_dir": str(log_path.absolute())
        }
    )
