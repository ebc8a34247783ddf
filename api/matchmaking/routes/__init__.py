from fastapi import FastAPI

from .matchmaking import router as matchmaking_router, scaffold_router as matchmaking_scaffold_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(matchmaking_router, tags=["matchmaking"])
    app.include_router(matchmaking_scaffold_router, prefix="/_scaffold/matchmaking", tags=["scaffold-matchmaking"])


__all__ = ["include_modular_routers"]
