import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from canteen.core.db import init_db, close_db
from canteen.core.logging_config import setup_logging
from canteen.api.v1.auth import router as auth_router
from canteen.api.v1.employees import router as employees_router
from canteen.api.v1.menu import router as menu_router
from canteen.api.v1.orders import router as orders_router
from canteen.api.v1.payments import router as payments_router
from canteen.core.config import PROJECT_NAME, VERSION
from canteen.core.exception_handlers import setup_exception_handlers

setup_logging()
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db()  # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers for modular API structure
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(employees_router, prefix="/api/v1/employees", tags=["Employees"])
app.include_router(menu_router, prefix="/api/v1/menu", tags=["Menu & Catalog"])
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Management"])
app.include_router(payments_router, prefix="/api/v1/payments", tags=["Payments"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
