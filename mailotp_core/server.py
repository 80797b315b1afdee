"""
Server Entry Point
==================
Runs the OTP service under uvicorn.
"""

import uvicorn

from mailotp_core.api import create_app
from mailotp_core.config import Settings
from mailotp_core.logging import get_logger, setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_output=settings.log_json,
    )
    app = create_app(settings)
    get_logger(__name__).info("Starting server", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
