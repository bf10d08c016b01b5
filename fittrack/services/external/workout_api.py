"""
Workout API - Remote save collaborator used by trackers and the sync queue.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from fittrack.core.config import settings
from fittrack.core.errors import RemoteSaveError
from fittrack.core.logging import get_logger

logger = get_logger(__name__)


class WorkoutAPIInterface(ABC):
    """Abstract interface for the remote workout store."""

    @abstractmethod
    async def save_workout(self, activity_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Save a finished workout remotely.

        Args:
            activity_type: Running, Cycling, Swimming or Gym
            payload: Final workout record

        Returns:
            Dict with success, workout, achievements and message keys

        Raises:
            RemoteSaveError: Transport failure
        """
        pass


class _ResponseData(BaseModel):
    workout: Optional[Dict[str, Any]] = None
    achievementsEarned: List[Dict[str, Any]] = Field(default_factory=list)


class _ResponseEnvelope(BaseModel):
    status: str
    message: Optional[str] = None
    data: _ResponseData = Field(default_factory=_ResponseData)


class HttpWorkoutAPI(WorkoutAPIInterface):
    """
    REST implementation posting to {API_BASE_URL}/api/workouts.

    The backend answers with {"status": "success", "data": {"workout": ...,
    "achievementsEarned": [...]}}.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Backend base URL (defaults to settings.API_BASE_URL)
            token: Bearer token (defaults to settings.API_TOKEN)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token if token is not None else settings.API_TOKEN
        self.timeout = timeout or settings.API_TIMEOUT
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def save_workout(self, activity_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        endpoint = f"{self.base_url}/api/workouts"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(endpoint, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise RemoteSaveError(f"Workout save request failed: {type(e).__name__}: {e}") from e

        if response.status_code >= 500:
            raise RemoteSaveError(f"Workout API returned {response.status_code}")

        try:
            envelope = _ResponseEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RemoteSaveError(f"Unreadable workout API response: {e}") from e

        if response.status_code >= 400 or envelope.status != "success":
            logger.warning(
                "Workout API rejected save",
                activity_type=activity_type,
                status_code=response.status_code,
                message=envelope.message,
            )
            return {
                "success": False,
                "workout": None,
                "achievements": [],
                "message": envelope.message or "Failed to save workout",
            }

        logger.info(
            "Workout saved remotely",
            activity_type=activity_type,
            achievements=len(envelope.data.achievementsEarned),
        )

        return {
            "success": True,
            "workout": envelope.data.workout,
            "achievements": envelope.data.achievementsEarned,
            "message": f"{activity_type} session saved successfully!",
        }
