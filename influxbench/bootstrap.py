"""
Resets the target bucket before the benchmark starts.

The reset is destructive: an existing bucket with the configured name is
deleted along with all of its data. Never point the benchmark at a shared
bucket.
"""

from influxdb_client import Bucket, InfluxDBClient
from influxdb_client.rest import ApiException

from influxbench.config import BenchmarkSettings
from influxbench.errors import BootstrapError, ConfigurationError
from influxbench.logging_config import get_logger, log_performance

logger = get_logger(__name__)


class BucketBootstrapper:
    def __init__(self, org: str, bucket: str):
        self.org = org
        self.bucket = bucket

    def resolve_org_id(self, client: InfluxDBClient) -> str:
        """Id of the single organization named ``self.org``."""
        try:
            orgs = client.organizations_api().find_organizations(org=self.org)
        except ApiException as e:
            if e.status != 404:
                raise BootstrapError(f"Listing organizations failed: {e}") from e
            # The server answers 404 when no organization has that name
            orgs = []
        except Exception as e:
            raise BootstrapError(f"Listing organizations failed: {e}") from e

        matches = [o for o in orgs if o.name == self.org]
        if not matches:
            raise ConfigurationError(f"No organization named '{self.org}'")
        if len(matches) > 1:
            raise ConfigurationError(f"{len(matches)} organizations are named '{self.org}'")
        return matches[0].id

    @log_performance(logger, "bucket reset")
    def reset(self, client: InfluxDBClient) -> Bucket:
        """
        Delete the bucket if it exists and create it again, empty.

        Raises:
            ConfigurationError: if the organization name matches zero or several organizations
            BootstrapError: on any API or network failure
        """
        org_id = self.resolve_org_id(client)
        buckets_api = client.buckets_api()

        try:
            # Only buckets of the resolved org; a same-named bucket elsewhere is left alone
            existing = buckets_api.find_buckets(org_id=org_id, name=self.bucket).buckets or []
            for bucket in existing:
                logger.warning("Deleting existing bucket '%s' (%s)", bucket.name, bucket.id)
                buckets_api.delete_bucket(bucket)
            created = buckets_api.create_bucket(bucket_name=self.bucket, org_id=org_id)
        except Exception as e:
            raise BootstrapError(f"Resetting bucket '{self.bucket}' failed: {e}") from e

        logger.info("Created bucket '%s' (%s) in org '%s'", created.name, created.id, self.org)
        return created


def bootstrap_bucket(settings: BenchmarkSettings) -> Bucket:
    """Open a management client for ``settings`` and reset the bucket."""
    with InfluxDBClient(url=settings.host, token=settings.token, org=settings.org) as client:
        return BucketBootstrapper(settings.org, settings.bucket).reset(client)
