import logging

from canteen.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configures the root logger once for the API process."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Set logging level for Tortoise ORM
    logging.getLogger("tortoise").setLevel(logging.INFO)
