"""Data access/deletion request endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse

from flightdeck.api.dependencies import (
    ClientIdentityDep,
    SettingsDep,
    get_data_request_service,
)
from flightdeck.api.pages import render_page
from flightdeck.core.errors import (
    NotConfiguredError,
    NotFoundOrExpiredError,
    UpstreamDeliveryError,
    ValidationError,
)
from flightdeck.schemas.data_request import DataRequestAccepted, DataRequestCreate
from flightdeck.services.data_requests import (
    ConfirmOutcome,
    DataRequestAction,
    DataRequestService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data-requests", tags=["privacy"])

DataRequestServiceDep = Annotated[DataRequestService, Depends(get_data_request_service)]


@router.post("", response_model=DataRequestAccepted)
async def submit_data_request(
    payload: DataRequestCreate,
    service: DataRequestServiceDep,
    identity: ClientIdentityDep,
) -> DataRequestAccepted:
    """Start an access or deletion request and email its confirmation link.

    The response is identical whatever data may exist for the address.
    """
    receipt = await service.create(payload.email, payload.action, identity)
    return DataRequestAccepted(ok=True, message=receipt.message)


@router.get("/confirm", response_class=HTMLResponse)
async def confirm_data_request(
    service: DataRequestServiceDep,
    config: SettingsDep,
    token: str | None = None,
) -> HTMLResponse:
    """Process the request behind an emailed confirmation link."""
    home = config.public_site_url
    try:
        result = await service.confirm(token)
    except ValidationError:
        return render_page(
            "Invalid request",
            "This confirmation link is incomplete. Please use the full link from your email.",
            status_code=status.HTTP_400_BAD_REQUEST,
            home_url=home,
        )
    except NotFoundOrExpiredError:
        return render_page(
            "Link expired",
            "This confirmation link is invalid or has expired. "
            "Please submit a new request from the privacy page.",
            status_code=status.HTTP_404_NOT_FOUND,
            home_url=home,
        )
    except (UpstreamDeliveryError, NotConfiguredError) as exc:
        logger.warning("Data request confirmation failed: %s", exc.message)
        return render_page(
            "Something went wrong",
            "We could not complete your request right now. "
            "Please open the link from your email again in a few minutes.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            home_url=home,
        )

    if result.outcome is ConfirmOutcome.ALREADY_PROCESSED:
        return render_page(
            "Already processed",
            "This request has already been processed. No further action is needed.",
            home_url=home,
        )

    detail = (
        "Your deletion request has been completed."
        if result.action is DataRequestAction.DELETE
        else "Your access request has been completed."
    )
    return render_page(
        "Request confirmed",
        f"{detail} We have emailed you the details.",
        home_url=home,
    )
