import boto3
import pytest
from botocore.stub import Stubber

from keypair_resource.handler import KeyPairResourceHandler
from keypair_resource.models import KeyMaterial
from keypair_resource.secret_store import SecretStore

ACCOUNT_ARN = "arn:aws:secretsmanager:us-east-1:123456789012:secret:"
TEST_KEYS = KeyMaterial(public_key="PUBLIC PEM", private_key="PRIVATE PEM")


def secret_arn(name):
    return f"{ACCOUNT_ARN}{name}-AbCdEf"


class CallbackRecorder:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, url, response, timeout=None):
        self.calls.append((url, response))
        if self.error:
            raise self.error

    @property
    def responses(self):
        return [response for _, response in self.calls]


@pytest.fixture
def secrets_client():
    return boto3.client(
        "secretsmanager",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(secrets_client):
    with Stubber(secrets_client) as stub:
        yield stub


@pytest.fixture
def store(secrets_client):
    return SecretStore(secrets_client)


@pytest.fixture
def recorder():
    return CallbackRecorder()


@pytest.fixture
def resource_handler(store, recorder):
    return KeyPairResourceHandler(store, send=recorder, key_factory=lambda: TEST_KEYS)


@pytest.fixture
def make_event():
    def _make(request_type="Create", name="app-key", description="App signing key", regions=None, **extra):
        properties = {"ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:keypair"}
        if name is not None:
            properties["Name"] = name
        if description is not None:
            properties["Description"] = description
        if regions is not None:
            properties["SecretRegions"] = regions
        event = {
            "RequestType": request_type,
            "ResponseURL": "https://cloudformation-custom-resource-response.example.com/signed?x=1",
            "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/app/guid",
            "RequestId": "req-1",
            "LogicalResourceId": "AppKeyPair",
            "ResourceType": "Custom::KeyPair",
            "ResourceProperties": properties,
        }
        event.update(extra)
        return event

    return _make


def expect_create(stub, name, description, value, regions=None, arn=True):
    params = {"Name": name, "Description": description, "SecretString": value}
    if regions:
        params["AddReplicaRegions"] = [{"Region": r} for r in regions]
    response = {"Name": name}
    if arn:
        response["ARN"] = secret_arn(name)
    stub.add_response("create_secret", response, params)


def expect_exists(stub, name, listed=None):
    listed = [name] if listed is None else listed
    stub.add_response(
        "list_secrets",
        {"SecretList": [{"ARN": secret_arn(n), "Name": n} for n in listed]},
        {"Filters": [{"Key": "name", "Values": [name]}]},
    )


def expect_delete(stub, name, secret_id=None, arn=True):
    response = {"Name": name}
    if arn:
        response["ARN"] = secret_arn(name)
    stub.add_response(
        "delete_secret",
        response,
        {"SecretId": secret_id or name, "ForceDeleteWithoutRecovery": True},
    )
