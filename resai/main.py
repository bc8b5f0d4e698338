import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resai.api.v1.admin import router as admin_router
from resai.api.v1.ai import router as ai_router
from resai.api.v1.health import router as health_router
from resai.api.v1.resumes import router as resumes_router
from resai.api.v1.users import router as users_router
from resai.core.cors import cors_allow_credentials, cors_allowed_origins
from resai.core.errors import register_error_handlers
from resai.core.rate_limit import limiter
from resai.core.config import settings
from dotenv import load_dotenv
from resai.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env)

app = FastAPI(title="Resume AI API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
register_error_handlers(app)

app.include_router(health_router, prefix=settings.api_prefix, tags=["Health"])
app.include_router(users_router, prefix=settings.api_prefix, tags=["Users"])
app.include_router(resumes_router, prefix=settings.api_prefix, tags=["Resumes"])
app.include_router(ai_router, prefix=settings.api_prefix, tags=["AI"])
app.include_router(admin_router, prefix=settings.api_prefix, tags=["Admin"])
