"""REST API routes for users, exercises and logs."""

import json
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request
from schemas import ExerciseLog, ExerciseResponse, User
from services.errors import ValidationError
from services.tracker import ExerciseTrackerService
from utils.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter(prefix="/api", tags=["exercise-tracker"])

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_service(request: Request) -> ExerciseTrackerService:
    """Service instance created by the application lifespan."""
    return request.app.state.service


async def read_payload(request: Request) -> Dict[str, Any]:
    """Read a JSON or form-encoded request body into a dict.

    Unknown content types yield an empty payload, which the service then
    reports as missing fields.
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Request body is not valid JSON")
        return payload if isinstance(payload, dict) else {}

    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        return dict(form)

    return {}


@router.post("/users", response_model=User)
async def create_user(
    request: Request,
    service: ExerciseTrackerService = Depends(get_service),
):
    """Create a new user."""
    payload = await read_payload(request)
    return await service.create_user(payload.get("username"))


@router.get("/users", response_model=List[User])
async def list_users(service: ExerciseTrackerService = Depends(get_service)):
    """Get list of all users."""
    return await service.list_users()


@router.post("/users/{user_id}/exercises", response_model=ExerciseResponse)
async def add_exercise(
    user_id: str,
    request: Request,
    service: ExerciseTrackerService = Depends(get_service),
):
    """Add an exercise for a user."""
    payload = await read_payload(request)
    return await service.add_exercise(
        user_id,
        description=payload.get("description"),
        duration=payload.get("duration"),
        date=payload.get("date"),
    )


@router.get("/users/{user_id}/logs", response_model=ExerciseLog)
async def get_logs(
    user_id: str,
    date_from: Optional[str] = Query(None, alias="from", description="Earliest date, yyyy-mm-dd"),
    date_to: Optional[str] = Query(None, alias="to", description="Latest date, yyyy-mm-dd"),
    limit: Optional[str] = Query(None, description="Maximum number of entries"),
    service: ExerciseTrackerService = Depends(get_service),
):
    """Get a user's full or filtered exercise log."""
    log = await service.get_log(user_id, date_from=date_from, date_to=date_to, limit=limit)
    logger.info(f"Retrieved {log.count} log entries for user_id: {user_id}")
    return log
