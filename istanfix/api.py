"""
Istanfix API
============

FastAPI application for municipal issue reporting in Istanbul.

Endpoints:
- POST   /api/auth/signup                   - Register (user or government)
- POST   /api/auth/login                    - Log in, returns access token
- GET    /api/auth/me                       - Current user
- GET    /api/categories                    - Issue categories
- GET    /api/districts                     - Istanbul districts
- GET    /api/neighborhoods                 - Neighborhoods (?district_id=)
- GET    /api/districts/{id}/neighborhoods  - Neighborhoods of one district
- GET    /api/reports                       - Reports, newest first
- GET    /api/reports/category/{id}         - Reports of one category
- GET    /api/reports/{id}                  - One report
- POST   /api/reports                       - Create report (multipart, optional photo)
- PUT    /api/reports/{id}/status           - Update status (government)
- DELETE /api/reports/{id}                  - Delete report (owner or government)
- GET    /api/reports/{id}/comments         - Comments of a report
- POST   /api/reports/{id}/comments         - Add comment
- DELETE /api/comments/{id}                 - Delete comment (author or government)
- GET    /health                            - Health check

Run with:
    uvicorn istanfix.api:app --host 0.0.0.0 --port 3000
"""

import logging
import secrets
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api_reports import router as reports_router
from .auth import (
    AuthContext,
    AuthService,
    configure_password_hashing,
    get_password_hash,
    is_password_too_long,
    public_user,
    token_for_user,
    MAX_PASSWORD_BYTES,
)
from .config import Settings, get_settings
from .db.models import District, User, UserRole
from .db.session import Database
from .dependencies import get_app_settings, get_current_user, get_database, get_db
from .errors import AuthenticationFailed, IstanfixError
from .middleware import RateLimitMiddleware, RateLimiter, SecurityHeadersMiddleware
from .queries import list_categories, list_districts, list_neighborhoods
from .schemas import ErrorResponse, HealthResponse, LoginRequest, LoginResponse, MeResponse, SignupRequest, SignupResponse
from .seed import seed_reference_data
from .uploads import URL_PREFIX, ImageStore
from .validation import is_valid_email, parse_id, parse_role, require_fields

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
PAGES = ("index.html", "report.html", "login.html", "signup.html")


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@auth_router.post(
    "/signup",
    status_code=201,
    response_model=SignupResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def signup(
    request: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new account.

    The government role requires the configured verification code.
    """
    require_fields(request.model_dump(), ["name", "email", "password"], "Name, email, and password are required.")

    email = request.email.strip().lower()
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Invalid email format.")

    role = parse_role(request.role)
    if role == UserRole.GOVERNMENT:
        supplied = (request.gov_verification_code or "").strip()
        if not secrets.compare_digest(supplied.encode("utf-8"), settings.gov_verification_code.encode("utf-8")):
            logger.warning(f"Government signup rejected for {email}: bad verification code")
            raise HTTPException(status_code=403, detail="Invalid government verification code.")

    if is_password_too_long(request.password):
        raise HTTPException(
            status_code=400,
            detail=f"Password is too long (max {MAX_PASSWORD_BYTES} bytes).",
        )

    if AuthService(db).get_user_by_email(email):
        raise HTTPException(status_code=400, detail="Email already registered.")

    user = User(
        name=request.name.strip(),
        email=email,
        hashed_password=get_password_hash(request.password),
        role=role.value,
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered.")

    logger.info(f"User {user.id} registered ({user.role})")
    return SignupResponse(
        userId=user.id,
        email=user.email,
        role=user.role,
        access_token=token_for_user(user, settings),
    )


@auth_router.post("/login", response_model=LoginResponse, responses={400: {"model": ErrorResponse}})
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    require_fields(request.model_dump(), ["email", "password"], "Email and password are required.")

    user = AuthService(db).authenticate_user(request.email.strip().lower(), request.password)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid email or password.")

    logger.info(f"User {user.id} logged in")
    return LoginResponse(user=public_user(user), access_token=token_for_user(user, settings))


@auth_router.get("/me", response_model=MeResponse, responses={401: {"model": ErrorResponse}})
async def me(auth: AuthContext = Depends(get_current_user)):
    return MeResponse(user=auth.public_user())


# =============================================================================
# REFERENCE DATA
# =============================================================================

reference_router = APIRouter(prefix="/api", tags=["reference"])


@reference_router.get("/categories")
async def get_categories(db: Session = Depends(get_db)):
    return {"message": "success", "data": list_categories(db)}


@reference_router.get("/districts")
async def get_districts(db: Session = Depends(get_db)):
    return {"message": "success", "data": list_districts(db)}


@reference_router.get("/neighborhoods")
async def get_neighborhoods(district_id: Optional[str] = None, db: Session = Depends(get_db)):
    return {"message": "success", "data": list_neighborhoods(db, parse_id(district_id, "district_id"))}


@reference_router.get("/districts/{district_id}/neighborhoods")
async def get_district_neighborhoods(district_id: int, db: Session = Depends(get_db)):
    if not db.get(District, district_id):
        raise HTTPException(status_code=404, detail="District not found.")
    return {"message": "success", "data": list_neighborhoods(db, district_id)}


# =============================================================================
# HEALTH & PAGES
# =============================================================================

system_router = APIRouter(tags=["system"])


@system_router.get("/health", response_model=HealthResponse)
async def health_check(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    """Health check endpoint"""
    db_status = "unavailable"
    if database.is_open:
        try:
            with database.session() as db:
                db.execute(text("SELECT 1"))
            db_status = "ok"
        except SQLAlchemyError as e:
            logger.error(f"Health check: database unavailable: {e}")

    return HealthResponse(
        status="healthy" if db_status == "ok" else "degraded",
        version=settings.service_version,
        database=db_status,
    )


def _page_response(name: str) -> FileResponse:
    return FileResponse(str(STATIC_DIR / name), media_type="text/html")


@system_router.get("/", include_in_schema=False)
async def index_page():
    return _page_response("index.html")


@system_router.get("/{page}", include_in_schema=False)
async def html_page(page: str):
    if page not in PAGES:
        raise HTTPException(status_code=404, detail="Not Found")
    return _page_response(page)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    msg = first.get("msg", "invalid value")
    return f"Invalid request: {loc}: {msg}" if loc else f"Invalid request: {msg}"


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the service as `{"error": message}`"""

    @app.exception_handler(IstanfixError)
    async def istanfix_error_handler(request: Request, exc: IstanfixError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationFailed) else None
        return _error(exc.status_code, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error(exc.status_code, detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Storage error on %s: %s", request.url.path, exc)
        message = str(getattr(exc, "orig", None) or exc)
        return _error(500, message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler - always return valid JSON"""
        logger.exception("Unhandled exception on %s", request.url.path)
        return _error(500, str(exc) or exc.__class__.__name__)


# =============================================================================
# APP FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The storage client, image store and settings live on `app.state` and reach
    handlers through dependencies, so tests can build isolated apps.
    """
    settings = settings or get_settings()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    configure_password_hashing(settings.bcrypt_rounds)

    app = FastAPI(
        title="Istanfix",
        description="Municipal issue reporting for Istanbul",
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    database = Database(settings.database_url, echo=settings.sql_echo, connect_timeout=settings.db_connect_timeout)
    image_store = ImageStore(settings.upload_dir, settings.max_upload_bytes)
    image_store.ensure_dir()

    app.state.settings = settings
    app.state.database = database
    app.state.image_store = image_store

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        enforce_https=settings.enforce_https,
        hsts_max_age=settings.hsts_max_age,
    )
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=RateLimiter(settings.redis_url),
            limit=settings.rate_limit_per_minute,
        )
        logger.info("Rate limiting middleware enabled")

    # Routes
    app.include_router(auth_router)
    app.include_router(reference_router)
    app.include_router(reports_router, prefix="/api")
    app.mount(f"/{URL_PREFIX}", StaticFiles(directory=str(image_store.base_dir)), name="uploads")
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(system_router)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Open storage, create schema, seed reference data"""
        logger.info(f"Starting Istanfix v{settings.service_version}")
        for warning in settings.validate_security_config():
            logger.warning(warning)

        database.open()
        database.create_schema()
        image_store.ensure_dir()

        if settings.seed_on_startup:
            result = seed_reference_data(database.session)
            logger.info(
                f"Reference data seeded: {result.categories} categories, "
                f"{result.districts} districts, {result.neighborhoods} neighborhoods"
            )
            if result.failed:
                logger.error(f"Seeding failed for: {', '.join(result.failed)}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        database.close()
        logger.info("Istanfix stopped")

    return app


app = create_app()


# =============================================================================
# Main (for direct execution)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "istanfix.api:app",
        host="0.0.0.0",
        port=3000,
        reload=True
    )
