class KeyPairResourceError(Exception):
    """Base class for errors raised by the key pair custom resource."""


class InvalidRequestError(KeyPairResourceError):
    pass


class MissingArnError(KeyPairResourceError):
    def __init__(self, secret_id):
        super().__init__(f"ARN for Secrets Manager secret {secret_id} not found.")
        self.secret_id = secret_id


class CallbackDeliveryError(KeyPairResourceError):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
