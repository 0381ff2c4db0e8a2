"""Typed request and response documents for the CloudFormation custom resource.

Field aliases match the names CloudFormation uses on the wire, so events can
be validated straight from the Lambda payload and responses dumped with
``by_alias=True``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from keypair_resource.errors import InvalidRequestError


class RequestType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class LifecycleEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    request_type: RequestType = Field(alias="RequestType")
    response_url: str = Field(alias="ResponseURL", min_length=1)
    stack_id: str = Field(alias="StackId", min_length=1)
    request_id: str = Field(alias="RequestId", min_length=1)
    logical_resource_id: str = Field(alias="LogicalResourceId", min_length=1)
    physical_resource_id: str | None = Field(default=None, alias="PhysicalResourceId")
    resource_properties: dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")

    @classmethod
    def from_event(cls, event):
        try:
            return cls.model_validate(event)
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid lifecycle event: {exc}") from exc

    def properties(self):
        return KeyPairProperties.from_mapping(self.resource_properties)


class KeyPairProperties(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = Field(alias="Name", min_length=1)
    description: str = Field(alias="Description")
    secret_regions: tuple[str, ...] | None = Field(default=None, alias="SecretRegions")

    @classmethod
    def from_mapping(cls, properties):
        try:
            return cls.model_validate(properties)
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid resource properties: {exc}") from exc

    @property
    def public_secret_name(self):
        return secret_name(self.name, "public")

    @property
    def private_secret_name(self):
        return secret_name(self.name, "private")


def secret_name(resource_name, kind):
    return f"{resource_name}/{kind}"


class CallbackResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: ResponseStatus = Field(alias="Status")
    physical_resource_id: str = Field(alias="PhysicalResourceId")
    stack_id: str = Field(alias="StackId")
    request_id: str = Field(alias="RequestId")
    logical_resource_id: str = Field(alias="LogicalResourceId")
    data: dict[str, str] | None = Field(default=None, alias="Data")
    reason: str | None = Field(default=None, alias="Reason")

    @model_validator(mode="after")
    def _reason_only_on_failure(self):
        if self.status is ResponseStatus.FAILED and not self.reason:
            raise ValueError("a FAILED response requires a Reason")
        if self.status is ResponseStatus.SUCCESS and self.reason is not None:
            raise ValueError("a SUCCESS response must not carry a Reason")
        return self

    @classmethod
    def for_result(cls, event, physical_resource_id, result):
        common = {
            "physical_resource_id": physical_resource_id,
            "stack_id": event.stack_id,
            "request_id": event.request_id,
            "logical_resource_id": event.logical_resource_id,
        }
        if isinstance(result, Success):
            return cls(status=ResponseStatus.SUCCESS, data=result.data, **common)
        return cls(status=ResponseStatus.FAILED, reason=result.reason, **common)

    def to_json(self):
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class KeyMaterial:
    public_key: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class Success:
    data: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Failure:
    reason: str
