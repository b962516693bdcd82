"""
Dependencies module - reusable FastAPI dependencies for route handlers.

The Dispatcher is built once in the app lifespan and kept on app.state.
Tests replace it with app.dependency_overrides[get_dispatcher].
"""

from fastapi import HTTPException, Request, status

from assistant.services.dispatcher import Dispatcher


def get_dispatcher(request: Request) -> Dispatcher:
    """
    Return the application's Dispatcher.

    Raises:
        HTTPException 503: If the app has not finished starting up
    """
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dispatcher not initialized",
        )
    return dispatcher
