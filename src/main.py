import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.db import create_tables
from src.domain.errors import TradeSpinError
from src.routers import pool, trades

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app):
    """Create the tables this service owns.
    This function is called to start the server.
    """
    await create_tables()
    try:
        yield
    finally:
        await trades.redis.aclose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(pool.pool_router)
app.include_router(trades.trade_router)


@app.exception_handler(TradeSpinError)
async def handle_trade_spin_error(request: Request, exc: TradeSpinError) -> JSONResponse:
    if exc.status_code >= 500:
        logging.error(f"{request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Basic"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{location}: {errors[0].get('msg')}" if location else errors[0].get("msg")
    else:
        message = "Invalid request."
    return JSONResponse(status_code=400, content={"ok": False, "error": message})


@app.get("/health")
async def health():
    return {"status": "ok"}


# if __name__ == "__main__":
#     uvicorn.run(app, host="0.0.0.0", port=8080, reload=True)
