import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inbound.app.api.v1.router import router as v1_router
from inbound.app.config import LOG_LEVEL
from inbound.services.errors import AcceptanceError

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="INBOUND ACCEPTANCE", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(AcceptanceError)
async def acceptance_error_handler(request: Request, exc: AcceptanceError):
    return JSONResponse(status_code=exc.status_code, content=exc.payload())
