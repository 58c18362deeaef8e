from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import get_settings
from database import lifespan
from routers import api_status, authentication, education, experience, profile, resume, skill, template


settings = get_settings()

description = """
A RESTful API for building resumes from templates, using FastAPI and SQLModel 🚀
"""


app = FastAPI(lifespan=lifespan,
              title=settings.APP_NAME,
              description=description,
              version="0.1.0",
              license_info={
                  "name": "MIT",
                  "url": "https://opensource.org/license/MIT",
              },
              default_response_class=ORJSONResponse)

app.add_middleware(GZipMiddleware, minimum_size=1000, compresslevel=4)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS", "HEAD", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "accept", "Authorization", "Authorization-Refresh", "X-Client-JWK"],
)

upload_dir = Path(settings.UPLOAD_DIR)
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["X-Frame-Options"] = "DENY"
    return response


app.include_router(api_status.router, tags=["API status"])
app.include_router(authentication.router, tags=["Authentication"])
app.include_router(profile.router, tags=["Profiles"])
app.include_router(template.router, tags=["Templates"])
app.include_router(resume.router, tags=["Resumes"])
app.include_router(experience.router, tags=["Experiences"])
app.include_router(education.router, tags=["Educations"])
app.include_router(skill.router, tags=["Skills"])


def run():
    """Serve the API with uvicorn; reloads on code changes in development."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
