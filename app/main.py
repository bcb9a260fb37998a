import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.auth.router import router as auth_router
from app.profiles.router import router as profiles_router
from app.practitioners.router import router as practitioners_router
from app.sessions.router import router as sessions_router
from app.reviews.router import router as reviews_router
from app.uploads.router import router as uploads_router
from app.media.router import router as media_router
from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(practitioners_router)
app.include_router(sessions_router)
app.include_router(reviews_router)
app.include_router(uploads_router)
app.include_router(media_router)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable"},
    )


@app.get("/health")
def health():
    return {"status": "ok"}
