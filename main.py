import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ledgerwise.api.routes import router
from ledgerwise.api.split import router as split_router
from ledgerwise.config import get_settings
from ledgerwise.errors import StatusTransitionError, ValidationError

# Configure loguru
logger.remove()
logger.add(sys.stderr, level="INFO", format="{time:HH:mm:ss} | {level:<7} | {message}")

app = FastAPI(title="Ledgerwise", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("{} {}", request.method, request.url.path)
    response: Response = await call_next(request)
    logger.info("→ {}", response.status_code)
    return response


@app.exception_handler(ValidationError)
async def validation_error(request: Request, exc: ValidationError):
    logger.warning("Rejected {}: {}", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StatusTransitionError)
async def status_transition_error(request: Request, exc: StatusTransitionError):
    logger.warning("Rejected {}: {}", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


app.include_router(router)
app.include_router(split_router)

settings = get_settings()


@app.on_event("startup")
async def startup():
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY not set, AI insights will report errors")
    logger.info("Ledger at {}, forms at {}", settings.db_path, settings.forms_path)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
