# docportal/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .database import engine
from . import models
from .api import analytics, documents, folders, search, trash

# Create all tables on startup
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="School Document Portal API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify the portal's frontend URL
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(folders.router)
app.include_router(documents.router)
app.include_router(search.router)
app.include_router(trash.router)
app.include_router(analytics.router)

@app.get("/")
async def root():
    return {"message": "School Document Portal API is running"}
