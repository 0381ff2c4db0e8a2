import logging

import boto3

from keypair_resource.errors import MissingArnError

logger = logging.getLogger(__name__)


def replica_regions(regions):
    if not regions:
        return None
    return [{"Region": region} for region in regions]


class SecretStore:
    """Thin wrapper over a Secrets Manager client."""

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_settings(cls, settings):
        client = boto3.client(
            "secretsmanager",
            region_name=settings.aws_region,
            endpoint_url=settings.secrets_endpoint_url,
        )
        return cls(client)

    def save_secret(self, secret_id, secret_string, description, regions=None):
        params = {
            "Name": secret_id,
            "Description": description,
            "SecretString": secret_string,
        }
        replicas = replica_regions(regions)
        if replicas:
            params["AddReplicaRegions"] = replicas

        response = self._client.create_secret(**params)
        arn = response.get("ARN")
        if not arn:
            raise MissingArnError(secret_id)
        logger.info("Created secret %s: %s", secret_id, arn)
        return arn

    def secret_exists(self, secret_id):
        # The name filter matches prefixes and pages may come back empty
        # with a NextToken, so scan every page for the exact name
        pages = self._client.get_paginator("list_secrets").paginate(
            Filters=[{"Key": "name", "Values": [secret_id]}]
        )
        return any(
            s.get("Name") == secret_id
            for page in pages
            for s in page.get("SecretList", [])
        )

    def force_delete(self, secret_id):
        """Delete a secret by name or ARN with no recovery window; returns its ARN."""
        response = self._client.delete_secret(
            SecretId=secret_id,
            ForceDeleteWithoutRecovery=True,
        )
        arn = response.get("ARN")
        logger.info("Deleted secret %s: %s", secret_id, arn)
        return arn

    def delete_secret(self, secret_id):
        """Delete a secret immediately; returns its ARN, or None if it does not exist."""
        if not self.secret_exists(secret_id):
            logger.info("Secret %s does not exist, skipping delete", secret_id)
            return None
        return self.force_delete(secret_id)
