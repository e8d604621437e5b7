import logging

import uvicorn

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from internhours.routers import hours
from internhours.config import settings

PROD_MODE = settings.PRODUCTION_MODE

app = FastAPI(title=settings.PROJECT_TITLE)

app.include_router(hours.router, prefix="/hours", tags=["hours"])

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logging.basicConfig(
    level=logging.INFO,  # Set the logging level to INFO
    format='%(asctime)s - %(levelname)s - %(message)s',  # Log format
)

@app.get("/")
def index():
    return {"message": "Hello Intern Hours"}


if __name__ == "__main__":
    if PROD_MODE == True:
        # Run Uvicorn without reload in production
        uvicorn.run("internhours.main:app", host="0.0.0.0", port=11000, reload=False)

    else:
        # Run Uvicorn with reload=True in development mode
        uvicorn.run("internhours.main:app", host="0.0.0.0", port=11000, reload=True)
