"""Async client and submission handler for the team registration API."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from teambot.logging import get_logger
from teambot.schemas import RegistrationForm


logger = get_logger(__name__)

CREATE_TEAM_ENDPOINT = "users/team/create"


class RegistrationApiError(Exception):
    """The API rejected the submission or answered with an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RegistrationApiClient:
    """HTTP client posting team registrations to the remote API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        attempts: int = 1,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/"
        self._attempts = max(attempts, 1)
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        headers = {"Content-Type": "application/json"}

        # Only transport failures are repeated, and only when more than one
        # attempt is configured; HTTP error answers are final.
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                response = await self._client.post(
                    endpoint,
                    json=payload,
                    headers=headers,
                )

        if not response.is_success:
            logger.error(
                "registration_api_request_failed",
                status=response.status_code,
                body=response.text,
                endpoint=endpoint,
            )
            raise RegistrationApiError(
                f"Registration API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "registration_api_invalid_body",
                status=response.status_code,
                endpoint=endpoint,
            )
            raise RegistrationApiError(
                "Registration API returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

    async def create_team(self, form: RegistrationForm) -> Any:
        payload = form.to_payload()
        logger.info(
            "registration_api_create_team",
            team_name=form.teamName,
            members=len(form.teamMembers),
        )
        return await self._post(CREATE_TEAM_ENDPOINT, payload)


@dataclass
class SubmissionStatus:
    """UI flags of the confirmation screen; at most one is set at a time."""

    loading: bool = False
    success: bool = False
    error: bool = False

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "SubmissionStatus":
        return cls(**data.get("submission", {}))

    def to_data(self) -> dict[str, dict[str, bool]]:
        return {"submission": asdict(self)}


class RegistrationSubmitter:
    """Submit a validated form and reflect the outcome in a ``SubmissionStatus``."""

    def __init__(self, client: RegistrationApiClient) -> None:
        self._client = client

    async def submit(
        self,
        form: RegistrationForm,
        status: Optional[SubmissionStatus] = None,
    ) -> SubmissionStatus:
        status = status or SubmissionStatus()
        status.loading = True
        status.success = False
        status.error = False

        logger.info("team_registration_submit", team_name=form.teamName)
        try:
            response = await self._client.create_team(form)
        except RegistrationApiError as exc:
            logger.error(
                "team_registration_failed",
                status=exc.status_code,
                error=str(exc),
            )
            status.error = True
        except httpx.HTTPError as exc:
            logger.error("team_registration_failed", status=None, error=repr(exc))
            status.error = True
        else:
            logger.info("team_registration_succeeded", response=response)
            status.success = True
        finally:
            status.loading = False

        return status
