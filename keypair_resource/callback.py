import logging

import requests

from keypair_resource.errors import CallbackDeliveryError

logger = logging.getLogger(__name__)


def send_response(response_url, response, timeout=None):
    """PUT the response document to the pre-signed CloudFormation URL."""
    body = response.to_json().encode("utf-8")
    headers = {
        # The pre-signed URL is signed with an empty content type
        "content-type": "",
        "content-length": str(len(body)),
    }

    try:
        result = requests.put(response_url, data=body, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise CallbackDeliveryError(f"Failed to send response: {exc}") from exc

    if result.status_code >= 400:
        raise CallbackDeliveryError(
            f"Server returned error {result.status_code}: {result.reason}",
            status_code=result.status_code,
        )
    logger.info("Sent %s response for request %s", response.status.value, response.request_id)
