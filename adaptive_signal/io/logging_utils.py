import logging


LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


def setup_logging(level: int = logging.INFO):
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


logger = logging.getLogger("adaptive_signal")
