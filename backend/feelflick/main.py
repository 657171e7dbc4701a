from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware

import feelflick.utils.logger  # noqa: F401
from feelflick.core.database import init_db
from feelflick.api import maintenance
from feelflick.api.recommendations import router as recommendations_router

app = FastAPI(title="FeelFlick API", version="1.0.0")

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recommendations_router, prefix="/api/recommendations", tags=["Recommendations"])
app.include_router(maintenance.router, prefix="/api/maintenance", tags=["Maintenance"])


@app.on_event("startup")
def startup_event():
    init_db()


@app.get("/")
def root():
    return {"status": "FeelFlick API Running"}
