import logging
from typing import Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from config import LOG_LEVEL, RESOURCE_PATH
from database import Base, engine, get_db
from errors import ErrorCode, UserServiceError, error_response
from schemas import UserDTO
from service import OperationResult, UserService, resource_location
from store import UserStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables on startup (simple dev setup)
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Versioned User Service")


def get_service(db: Session = Depends(get_db)) -> UserService:
    """FastAPI dependency wiring a request-scoped store into the service."""
    return UserService(UserStore(db))


@app.exception_handler(UserServiceError)
async def handle_service_error(request: Request, exc: UserServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        error_response(ErrorCode.INVALID_REQUEST, "Malformed request body."),
        status_code=400,
    )


def render(
    result: OperationResult,
    status_code: int,
    redirect_status: int,
    location: Optional[str] = None,
) -> Response:
    """Turn an operation result into a response, honouring superseded-version redirects."""
    if result.redirect is not None:
        headers = {"Location": result.redirect}
        if result.payload is None:
            return Response(status_code=redirect_status, headers=headers)
        return JSONResponse(result.payload, status_code=redirect_status, headers=headers)
    headers = {"Location": location} if location else None
    return JSONResponse(result.payload, status_code=status_code, headers=headers)


# ---------------- User resource ----------------

@app.get(RESOURCE_PATH + "/{username}")
def get_user(
    username: str,
    version: Optional[str] = None,
    service: UserService = Depends(get_service),
):
    """Return the user in the requested or stored representation."""
    return render(service.read(username, version), 200, 301)


@app.post(RESOURCE_PATH + "/{username}")
def post_user(
    username: str,
    version: Optional[str] = None,
    payload: UserDTO = Body(...),
    service: UserService = Depends(get_service),
):
    """
    Create a user. The representation version is taken from ``version`` or,
    when absent, inferred from the body:

        {"firstName": "Jane", "lastName": "Doe"}   -> version 2
        {"fullName": "Jane Doe"}                   -> version 1
    """
    result = service.create(username, version, payload)
    return render(result, 201, 308, location=resource_location(username))


@app.put(RESOURCE_PATH + "/{username}")
def put_user(
    username: str,
    version: Optional[str] = None,
    payload: UserDTO = Body(...),
    service: UserService = Depends(get_service),
):
    """Partially update a user; fields missing from the body are left untouched."""
    return render(service.update(username, version, payload), 200, 301)


@app.delete(RESOURCE_PATH + "/{username}")
def delete_user(
    username: str,
    version: Optional[str] = None,
    service: UserService = Depends(get_service),
):
    """Delete a user and return the deleted representation."""
    return render(service.delete(username, version), 200, 301)


# ---------------- Maintenance ----------------

@app.post("/migrations")
def run_migrations(service: UserService = Depends(get_service)):
    """Bring every legacy user to the newest storage shape."""
    return JSONResponse(service.migrate_all())
