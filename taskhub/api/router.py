from fastapi import APIRouter

from ..routers import auth as auth_router
from ..routers import tasks as tasks_router
from ..routers import users as users_router


api_router = APIRouter()

api_router.include_router(auth_router.router)
api_router.include_router(users_router.router)
api_router.include_router(tasks_router.router)


@api_router.get("/api", tags=["auth"])  # lightweight meta endpoint
def api_info():
    return {
        "name": "Taskhub API",
        "version": "v1",
        "docs": "/docs",
        "auth": {
            "login": "/auth/login",
            "me": "/auth/me",
            "register": "/users",
            "profile": "/users/profile",
        },
        "tasks": "/tasks",
    }
