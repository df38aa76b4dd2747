import logging
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventquiz_backend.api.api_builder import CrudRouter
from eventquiz_backend.api.identity import identity_router
from eventquiz_backend.api.user_roles import user_roles_router
from eventquiz_backend.interface.leaderboard_entries import LeaderboardEntryInterface
from eventquiz_backend.interface.profiles import ProfileInterface
from eventquiz_backend.interface.questions import QuestionInterface
from eventquiz_backend.interface.quizzes import QuizInterface
from eventquiz_backend.permissions.auth import get_current_principal
from eventquiz_backend.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="eventquiz-backend", debug=settings.DEBUG_MODE != "production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

CrudRouter(QuizInterface).register_routes(app)
CrudRouter(QuestionInterface).register_routes(app)
CrudRouter(LeaderboardEntryInterface).register_routes(app)
CrudRouter(ProfileInterface).register_routes(app)

app.include_router(
    user_roles_router,
    prefix="/user-roles",
    tags=["user roles"],
    dependencies=[Depends(get_current_principal)]
)

app.include_router(
    identity_router,
    prefix="/identity",
    tags=["identity"]
)

@app.get("/health")
async def health():
    return {"status": "healthy"}
