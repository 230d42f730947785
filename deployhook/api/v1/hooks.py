"""GitHub webhook endpoint."""

import json

from fastapi import APIRouter, Request, Response, status

from deployhook.api.deps import EventRouterDep, SettingsDep
from deployhook.config import Settings
from deployhook.core.exceptions import AuthenticationFailure
from deployhook.services.signature import verify_webhook_payload
from deployhook.utils.logging import delivery_context, get_logger

logger = get_logger(__name__)

router = APIRouter()


def verify_delivery(request: Request, body: bytes, settings: Settings) -> None:
    """Raise AuthenticationFailure unless the delivery is signed with our secret."""
    if not verify_webhook_payload(
        body,
        request.headers.get("X-Hub-Signature-256"),
        settings.github_webhook_secret,
    ):
        raise AuthenticationFailure(request.headers.get("X-GitHub-Delivery"))


@router.post(
    "/github",
    summary="Receive a GitHub webhook delivery",
    response_class=Response,
)
async def github_hook(
    request: Request,
    event_router: EventRouterDep,
    settings: SettingsDep,
) -> Response:
    """Verify the delivery signature and dispatch the event.

    Deployment-level failures are logged, never reported back: GitHub only
    looks at the status code.
    """
    body = await request.body()
    event_type = request.headers.get("X-GitHub-Event", "")

    with delivery_context(request.headers.get("X-GitHub-Delivery"), event_type):
        try:
            verify_delivery(request, body, settings)
        except AuthenticationFailure:
            logger.warning("hook.rejected_signature")
            return Response(status_code=status.HTTP_403_FORBIDDEN)

        try:
            payload = json.loads(body)
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            logger.warning("hook.invalid_payload")
            return Response(status_code=status.HTTP_400_BAD_REQUEST)

        await event_router.dispatch(event_type, payload)

    return Response(status_code=status.HTTP_200_OK)
