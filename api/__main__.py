"""
Development server: python -m api
APP_ENV picks the config class (dev/test/prod); in production serve
create_app() from a WSGI server instead.
"""
import logging
import os

from . import create_app
from .config import get_config

logger = logging.getLogger(__name__)


def main(config_name=None):
    config_name = config_name or os.getenv("APP_ENV", "dev")
    app = create_app(config_name)
    host = os.getenv("FLASK_RUN_HOST", "127.0.0.1")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    logger.info(
        "Starting %s on %s:%s (issuer=%s)",
        get_config(config_name).__name__, host, port, app.config["JWT_ISSUER"],
    )
    app.run(host=host, port=port, debug=app.config["DEBUG"])
    return app


if __name__ == "__main__":
    main()
