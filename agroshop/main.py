import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from agroshop.config import Config
from agroshop.db.init import init_db
from agroshop.errors import AgroShopError
from agroshop.api import (
    users, products, farmers, bills, payments, accounts, reports, changes
)
from agroshop.auth.jwt import router as auth_router

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="agroshop",
    description="Backend API for an agrochemical shop: inventory, billing, credit ledger and reports",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Initialize database
@app.on_event("startup")
async def startup_event():
    init_db()


@app.exception_handler(AgroShopError)
async def agroshop_error_handler(request: Request, exc: AgroShopError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# rejected inputs such as NaN are not valid JSON, so they are left out of the echo
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": errors})


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(farmers.router, prefix="/farmers", tags=["farmers"])
app.include_router(bills.router, prefix="/bills", tags=["bills"])
app.include_router(payments.router, prefix="/payments", tags=["payments"])
app.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(changes.router, prefix="/changes", tags=["changes"])

@app.get("/")
def read_root():
    return {"message": "Welcome to the AgroShop API"}

@app.get("/health")
def health_check():
    return {"status": "ok"}
