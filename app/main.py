import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.routers import auth, engagement, medicines, profile
from app.services.image_storage import image_storage
from app.utils.response import create_response, error_response, handle_exception
from seed import run_seed

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.PROJECT_NAME)

# CORS for SPA / API access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = None
    if errors:
        location = [str(part) for part in errors[0].get("loc", ()) if part not in ("body", "query", "path")]
        field = location[-1] if location and not location[-1].isdigit() else None
    message = f"Invalid {field}" if field else "Invalid request body"
    return error_response(message, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return handle_exception(exc)


# Create tables and provision the pharmacist allow-list on startup
@app.on_event("startup")
async def startup_event():
    run_seed()


# Add routes
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(medicines.router)
app.include_router(engagement.router)

# Serve uploaded medicine images
app.mount(
    settings.MEDICINE_IMAGES_URL,
    StaticFiles(directory=image_storage.directory),
    name="medicine-images",
)


@app.get("/")
def home():
    try:
        return create_response({"message": "Medicine exchange API running", "service": "medicine-exchange-backend"})
    except Exception as exc:
        return handle_exception(exc)
