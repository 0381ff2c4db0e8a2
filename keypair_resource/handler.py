import functools
import logging

from keypair_resource.callback import send_response
from keypair_resource.config import HandlerSettings, configure_logging
from keypair_resource.keys import generate_key_pair
from keypair_resource.models import (
    CallbackResponse,
    Failure,
    KeyPairProperties,
    LifecycleEvent,
    RequestType,
    Success,
)
from keypair_resource.secret_store import SecretStore

logger = logging.getLogger(__name__)


class KeyPairResourceHandler:
    """Dispatches CloudFormation lifecycle events for an RSA key pair resource.

    Every Create or Delete event with a valid envelope produces exactly one
    callback, whether the operation succeeded or failed. Update events are
    ignored.
    """

    def __init__(self, secret_store, send=send_response, key_factory=generate_key_pair,
                 compensate_orphaned_secrets=True, callback_timeout=None):
        self.secret_store = secret_store
        self.send = send
        self.key_factory = key_factory
        self.compensate_orphaned_secrets = compensate_orphaned_secrets
        self.callback_timeout = callback_timeout

    @classmethod
    def from_settings(cls, settings):
        return cls(
            SecretStore.from_settings(settings),
            compensate_orphaned_secrets=settings.compensate_orphaned_secrets,
            callback_timeout=settings.callback_timeout_seconds,
        )

    def handle(self, event):
        """Handle one raw event; returns the response sent, or None when ignored."""
        request = LifecycleEvent.from_event(event)

        if request.request_type is RequestType.CREATE:
            operation = self.create_key_pair
        elif request.request_type is RequestType.DELETE:
            operation = self.delete_key_pair
        else:
            logger.warning("Ignoring %s request %s", request.request_type.value, request.request_id)
            return None

        physical_resource_id = request.physical_resource_id or request.logical_resource_id
        try:
            props = request.properties()
            physical_resource_id = props.name
            result = operation(props)
        except Exception:
            logger.exception("%s failed for %s", request.request_type.value, request.logical_resource_id)
            result = Failure(reason=f"{request.request_type.value} failed")

        response = CallbackResponse.for_result(request, physical_resource_id, result)
        self.send(request.response_url, response, timeout=self.callback_timeout)
        return response

    def create_key_pair(self, props: KeyPairProperties):
        keys = self.key_factory()
        logger.info(keys.public_key)

        public_key_arn = self.secret_store.save_secret(
            props.public_secret_name,
            keys.public_key,
            f"{props.description} (Public Key)",
            props.secret_regions,
        )

        try:
            private_key_arn = self.secret_store.save_secret(
                props.private_secret_name,
                keys.private_key,
                f"{props.description} (Private Key)",
                props.secret_regions,
            )
        except Exception:
            if self.compensate_orphaned_secrets:
                self._remove_orphan(public_key_arn)
            raise

        return Success({
            "PublicKey": keys.public_key,
            "PublicKeyArn": public_key_arn,
            "PrivateKeyArn": private_key_arn,
        })

    def delete_key_pair(self, props: KeyPairProperties):
        deleted = {
            "PublicKeyArn": self.secret_store.delete_secret(props.public_secret_name),
            "PrivateKeyArn": self.secret_store.delete_secret(props.private_secret_name),
        }
        return Success({key: arn for key, arn in deleted.items() if arn})

    def _remove_orphan(self, secret_arn):
        # Just created, so it may not be listed yet; delete by ARN without checking
        try:
            deleted = self.secret_store.force_delete(secret_arn)
        except Exception:
            logger.exception("Could not remove orphaned secret %s", secret_arn)
            return
        if deleted:
            logger.warning("Removed orphaned secret %s", deleted)
        else:
            logger.error("Orphaned secret %s was not removed", secret_arn)


@functools.lru_cache(maxsize=1)
def default_handler():
    settings = HandlerSettings()
    configure_logging(settings.log_level)
    return KeyPairResourceHandler.from_settings(settings)


def lambda_handler(event, context):
    default_handler().handle(event)
