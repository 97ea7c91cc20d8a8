from fastapi import FastAPI
from backend.app.api.v1.router import router as v1_router
from backend.app.core.logging import configure_logging

configure_logging()

app = FastAPI(title="PCB Inventory", version="0.1.0")
app.include_router(v1_router, prefix="/v1")
