import os
import json
import logging
from logging.config import dictConfig
from aiohttp import web

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(default_level: str = "INFO"):
    """Configure logging from LOGGING_CONFIG_FILE, or LOG_LEVEL if there is none."""
    logging_config_file = os.getenv("LOGGING_CONFIG_FILE", "")

    if len(logging_config_file) > 0:
        with open(logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(os.getenv("LOG_LEVEL", default_level).upper())


def invoke():
    configure_logging()

    from org.dsnp.frequency.app.config import load_settings
    from org.dsnp.frequency.app.server import start_web_server

    settings = load_settings()
    if settings.debug:
        logging.getLogger("org.dsnp").setLevel(logging.DEBUG)

    web.run_app(start_web_server(settings), port=settings.http_port)


if __name__ == "__main__":
    invoke()
