# envoearn/logger.py - file logging for the Flask app
import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def setup_logger(name, log_dir="logs", level=logging.INFO):
    """Set up a named logger with file rotation."""
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding the file handler twice (Flask already put its stream handler here)
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{name}.log"),
            maxBytes=10240,
            backupCount=10,
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    # app.logger is the "envoearn" logger, so service module loggers propagate to it
    app.logger.setLevel(level)

    if not app.config.get("LOG_TO_FILE"):
        return

    log_dir = app.config.get("LOG_DIR", "logs")
    if not os.path.isabs(log_dir):
        log_dir = os.path.join(app.instance_path, log_dir)

    setup_logger(app.logger.name, log_dir=log_dir, level=level)
