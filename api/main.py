from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config, db
from leaderboard import router as leaderboard_router
from users import router as users_router
from users.repository import UserRepository


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Connect once per process; no request is served before the indexes exist.
    database = await db.connect()
    try:
        repo = UserRepository(database)
        await repo.ensure_schema()
        app.state.user_repository = repo
        yield
    finally:
        await db.disconnect()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.client_origin()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are client errors (400), not 422.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc)},
    )


for prefix in ("", "/api"):
    app.include_router(users_router.router, prefix=prefix, tags=["users"], include_in_schema=not prefix)
    app.include_router(
        leaderboard_router.router, prefix=prefix, tags=["leaderboard"], include_in_schema=not prefix
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
