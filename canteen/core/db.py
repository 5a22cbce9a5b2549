import asyncio
import functools
import logging

from tortoise import Tortoise
from tortoise.exceptions import DBConnectionError, IntegrityError, OperationalError

from canteen.core.config import DB_URL, STORAGE_TIMEOUT
from canteen.core.errors import StorageTimeout, StorageUnavailable

log = logging.getLogger(__name__)

# Define all models modules for the ORM
MODELS_MODULES = [
    "canteen.models.catalog",
    "canteen.models.order",
    "canteen.models.employee",
]


async def init_db(db_url: str = DB_URL):
    """Initializes the Tortoise ORM connection and generates schemas."""
    try:
        await Tortoise.init(
            db_url=db_url,
            modules={"models": MODELS_MODULES},
        )
        # Generate the database schema (create tables)
        await Tortoise.generate_schemas()
        log.info("Database connection established and schemas generated.")
    except Exception as e:
        log.critical(f"Could not connect to database: {e}")
        # Re-raise to prevent the application from starting without a database
        raise


async def close_db():
    """Closes all database connections."""
    await Tortoise.close_connections()
    log.info("Database connections closed.")


def storage_bound(func):
    """
    Runs a service coroutine under STORAGE_TIMEOUT and maps driver failures
    onto StorageTimeout / StorageUnavailable. Integrity errors pass through so
    callers can report them as conflicts.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout=STORAGE_TIMEOUT)
        except asyncio.TimeoutError as e:
            log.error(f"Storage call {func.__name__} timed out after {STORAGE_TIMEOUT}s")
            raise StorageTimeout(f"{func.__name__} timed out") from e
        except IntegrityError:
            raise
        except (DBConnectionError, OperationalError) as e:
            log.error(f"Storage call {func.__name__} failed: {e}")
            raise StorageUnavailable(str(e)) from e

    return wrapper
