import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from competeedu.db import engine
from competeedu.init_db import init_models
from competeedu.routers import (
    auth_router, users_router, schools_router, events_router, criteria_router,
    submissions_router, evaluations_router, results_router, badges_router,
    votes_router, cms_router, notifications_router
)
from competeedu.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="CompeteEdu API",
    description="Evaluation and results pipeline for school competitions",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(schools_router)
app.include_router(events_router)
app.include_router(criteria_router)
app.include_router(submissions_router)
app.include_router(evaluations_router)
app.include_router(results_router)
app.include_router(badges_router)
app.include_router(votes_router)
app.include_router(cms_router)
app.include_router(notifications_router)


@app.on_event("startup")
async def startup_event():
    """Create tables and seed roles on startup"""
    await init_models(engine)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="CompeteEdu API",
        version="1.0.0",
        description="API with JWT authentication",
        routes=app.routes,
    )

    openapi_schema["components"]["securitySchemes"] = {
        "Bearer": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Enter your bearer token in the format **Bearer &lt;token&gt;**"
        }
    }

    openapi_schema["security"] = [{"Bearer": []}]

    public_prefixes = ["/auth/login", "/verify/", "/api/badge/", "/api/vote/", "/badges/gallery", "/cms/settings"]

    for path in openapi_schema["paths"]:
        if any(path.startswith(prefix) for prefix in public_prefixes):
            for method in openapi_schema["paths"][path]:
                if method.lower() in ["get", "post"]:
                    openapi_schema["paths"][path][method]["security"] = []

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
