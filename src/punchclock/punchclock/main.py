from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.settings import EngineSettings
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_engine() -> Container:
    """Load settings, optionally create the schema and wire every service."""

    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG")
    debug = bool(getattr(settings, "DEBUG", False))
    engine_settings = EngineSettings.from_module(settings)

    if debug:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        if debug:
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    return build_container(db_config=db_config, settings=engine_settings)


def main() -> None:
    container = create_engine()
    report = container.processing_service.process_pending()
    logger.info("process_pending: %s", report.summary())


if __name__ == "__main__":
    main()
