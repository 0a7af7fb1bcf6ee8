# api/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from core.config import configure_logging, get_settings
from core.errors import ErrorKind, ReadloomError
from core.sa.database import db
from api.routes import auth, books, chat, exchange_points, exchanges, forum, history, points, reports

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_AMOUNT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INSUFFICIENT_BALANCE: 402,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_EMAIL: 409,
    ErrorKind.INVALID_TRANSITION: 409,
    ErrorKind.NOT_AVAILABLE: 409,
    ErrorKind.SELF_EXCHANGE: 409,
    ErrorKind.DUPLICATE_CREDIT: 409,
    ErrorKind.EXTERNAL_SERVICE: 502,
}

EXTERNAL_SERVICE_MESSAGE = "An external service is unavailable, please try again later"

settings = get_settings()
configure_logging()

app = FastAPI(title="Readloom")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    session_cookie=settings.session_cookie_name,
    https_only=settings.session_https_only,
    same_site="lax",
)

@app.exception_handler(ReadloomError)
async def readloom_error_handler(request: Request, exc: ReadloomError):
    status_code = STATUS_CODES.get(exc.kind, 500)
    message = exc.message
    if exc.kind is ErrorKind.EXTERNAL_SERVICE:
        # Provider details stay in the server log
        message = EXTERNAL_SERVICE_MESSAGE
    return JSONResponse(status_code=status_code, content={"error": exc.kind.value, "detail": message})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": ErrorKind.VALIDATION.value, "detail": detail}
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "InternalError", "detail": "Internal server error"})

# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    db.init_db()

@app.get("/health")
async def health():
    return {"status": "ok"}

app.include_router(auth.router)
app.include_router(books.router)
app.include_router(history.router)
app.include_router(exchanges.router)
app.include_router(exchange_points.router)
app.include_router(forum.router)
app.include_router(chat.router)
app.include_router(reports.router)
app.include_router(points.router)
