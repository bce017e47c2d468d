import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.endpoints import applications, challenges, invitations, teams, users
from app.core.config import settings
from app.core.errors import ConsistencyError, TeamServiceError
from app.core.logging import init_sentry, setup_logging
from app.db.base import Base
from app.db.session import engine
from app.helpers.getters import isDebugMode
from app.middleware.logging import AccessLoggingMiddleware

logger = logging.getLogger(__name__)

# Initialize logging and error tracking
setup_logging()
init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Team service started in {settings.MODE} mode")
    yield
    await engine.dispose()


app = FastAPI(
    title="Team Service",
    description="""
## Teams for challenges

Users form teams to take part in challenges. Each team has one owner,
optional admins and members, a size cap and a visibility setting.

- **Invitations**: admins invite users, who accept or decline
- **Applications**: users ask to join; teams may auto-approve
- **Join links**: a shareable code lets anyone apply to a team

### Authentication
Every endpoint except `/health` expects a bearer token from the identity
provider. Its `sub` claim is the user id.

### Errors
Domain errors come back as `{"detail": "...", "code": "..."}`.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Access logs are noisy in development
app.add_middleware(AccessLoggingMiddleware, enabled=not isDebugMode())


@app.exception_handler(TeamServiceError)
async def team_service_error_handler(request: Request, exc: TeamServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(ConsistencyError)
async def consistency_error_handler(request: Request, exc: ConsistencyError):
    # Already reported to Sentry where it was detected
    return JSONResponse(
        status_code=500,
        content={"detail": "Team data is inconsistent", "code": "consistency_error"},
    )


app.include_router(teams.router, prefix="/api/teams", tags=["teams"])
app.include_router(invitations.router, prefix="/api", tags=["invitations"])
app.include_router(applications.router, prefix="/api", tags=["applications"])
app.include_router(challenges.router, prefix="/api/challenges", tags=["challenges"])
app.include_router(users.router, prefix="/api/me", tags=["me"])


@app.get("/health")
def health():
    return {"status": "ok"}
