"""FastAPI dependencies for the route modules."""
from fastapi import Request

from ridealert.deps import RideAlertDeps


def get_deps(request: Request) -> RideAlertDeps:
    """The RideAlertDeps built in main.lifespan."""
    return request.app.state.deps
