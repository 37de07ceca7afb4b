import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGINS, LOG_LEVEL, PORT
from database import ensure_indexes, get_db
from errors import ApiError, InvalidArgument, Unexpected
from routers import comments, dashboard, likes, playlists, subscriptions, tweets, users, videos

# -----------------------------------------------------
# Logging configuration
# -----------------------------------------------------
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s",
)
logger = logging.getLogger("videotube")


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(app.dependency_overrides.get(get_db, get_db)())
    yield


app = FastAPI(title="VideoTube backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (users, videos, comments, likes, subscriptions, playlists, tweets, dashboard):
    app.include_router(module.router)


# -------------------- Error envelope --------------------

@app.exception_handler(ApiError)
def handle_api_error(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return handle_api_error(request, InvalidArgument(message, errors))


@app.exception_handler(StarletteHTTPException)
def handle_http_error(request: Request, exc: StarletteHTTPException):
    body = {"statusCode": exc.status_code, "message": str(exc.detail), "success": False, "errors": []}
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(PyMongoError)
def handle_store_error(request: Request, exc: PyMongoError):
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=Unexpected("Database operation failed").to_dict())


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=Unexpected().to_dict())


# -------------------- Basic Routes --------------------

@app.get("/")
def read_root():
    return {"message": "VideoTube backend is running"}


@app.get("/test")
def test_database(database: Database = Depends(get_db)):
    info = {
        "backend": "running",
        "database_connected": False,
        "collections": [],
    }
    try:
        info["collections"] = database.list_collection_names()
        info["database_connected"] = True
    except PyMongoError as e:
        logger.warning("Database check failed: %s", e)
        info["error"] = str(e)
    return info


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
