# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import SessionLocal, init_db
from utils.changefeed import ChangeFeed
from utils.errors import InventoryError
from utils.seed import ensure_admin

# Router imports
from routes.auth import router as auth_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router
from routes.products import router as products_router
from routes.suppliers import router as suppliers_router
from routes.stock import router as stock_router
from routes.inventory import router as inventory_router
from routes.purchases import router as purchases_router
from routes.trusses import router as trusses_router
from routes.dashboard import router as dashboard_router
from routes.realtime import router as realtime_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization
init_db()

if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
    _db = SessionLocal()
    try:
        ensure_admin(_db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        _db.close()

app = FastAPI(title="Almoxarifado API", version="1.0.0")
app.state.change_feed = ChangeFeed()

# CORS configuration: local Vite dev server plus the deployed frontend
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors carry their own HTTP status
@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Router registration
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(logs_router)
app.include_router(products_router)
app.include_router(suppliers_router)
app.include_router(stock_router)
app.include_router(inventory_router)
app.include_router(purchases_router)
app.include_router(trusses_router)
app.include_router(dashboard_router)
app.include_router(realtime_router)


@app.get("/")
def read_root():
    return {"message": "Almoxarifado API is running"}
