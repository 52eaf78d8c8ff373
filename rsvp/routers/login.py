import logging
import os

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from rsvp.schemas import LoginRequest
from rsvp.utils.jwt import create_admin_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", summary="Admin login", response_model=dict)
async def login(body: LoginRequest) -> JSONResponse:
    """
    Check the admin password and return a JWT access token if it matches.
    """
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_password and body.password == admin_password:
        access_token = create_admin_token()
        return JSONResponse(
            {"access_token": access_token, "token_type": "bearer"},
            status_code=status.HTTP_200_OK,
        )
    logger.warning("Rejected admin login attempt")
    return JSONResponse(
        {"detail": "Invalid password"},
        status_code=status.HTTP_401_UNAUTHORIZED,
    )
