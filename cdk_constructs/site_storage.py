from aws_cdk import Duration, RemovalPolicy, Stack
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk import aws_s3 as s3
from cdk_nag import NagSuppressions, NagPackSuppression
from constructs import Construct
from config.base_config import InfrastructureConfig

# Services writing to or reading from resources encrypted with the shared key
KEY_SERVICE_PRINCIPALS = (
    "s3.amazonaws.com",
    "delivery.logs.amazonaws.com",
    "cloudfront.amazonaws.com",
)


class SiteStorage(Construct):
    """Shared encryption key, access logs bucket and assets bucket."""

    def __init__(self, scope: Construct, id: str, config: InfrastructureConfig, **kwargs) -> None:
        super().__init__(scope, id)
        self.config = config

        self.encryption_key = self._create_encryption_key()
        self.logs_bucket = self._create_logs_bucket()
        self.assets_bucket = self._create_assets_bucket()

    def _create_encryption_key(self) -> kms.Key:
        key = kms.Key(
            self, "EncryptionKey",
            enabled=True,
            enable_key_rotation=True,
            description=f"Encryption key for {self.config.project_name} resources.",
            removal_policy=RemovalPolicy.DESTROY,
            alias=self.config.cdn.key_alias
        )

        # CloudWatch Logs only accepts its regional principal in key policies
        region = Stack.of(self).region
        key.grant_encrypt_decrypt(
            iam.CompositePrincipal(
                iam.AccountRootPrincipal(),
                iam.ServicePrincipal(f"logs.{region}.amazonaws.com"),
                *[iam.ServicePrincipal(sp) for sp in KEY_SERVICE_PRINCIPALS]
            )
        )
        return key

    def _create_logs_bucket(self) -> s3.Bucket:
        bucket = s3.Bucket(
            self, "LogsBucket",
            bucket_name=self.config.cdn.logs_bucket_name,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            # Server access log targets only support SSE-S3 default encryption
            encryption=s3.BucketEncryption.S3_MANAGED,
            enforce_ssl=True,
            minimum_tls_version=1.2,
            # CloudFront standard logging writes through the bucket ACL
            access_control=s3.BucketAccessControl.LOG_DELIVERY_WRITE,
            object_ownership=s3.ObjectOwnership.OBJECT_WRITER,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            lifecycle_rules=[
                s3.LifecycleRule(
                    id="ttl",
                    expiration=Duration.days(self.config.cdn.logs_expiration_days),
                    transitions=[
                        s3.Transition(
                            storage_class=s3.StorageClass.INFREQUENT_ACCESS,
                            transition_after=Duration.days(self.config.cdn.logs_transition_days)
                        )
                    ]
                )
            ]
        )

        NagSuppressions.add_resource_suppressions(bucket, [
            NagPackSuppression(id="AwsSolutions-S1", reason="Access logs bucket does not log to itself")
        ])
        return bucket

    def _create_assets_bucket(self) -> s3.Bucket:
        return s3.Bucket(
            self, "AssetsBucket",
            bucket_name=self.config.cdn.assets_bucket_name,
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
            encryption_key=self.encryption_key,
            server_access_logs_bucket=self.logs_bucket,
            server_access_logs_prefix=self.config.cdn.bucket_logs_prefix,
            enforce_ssl=True,
            minimum_tls_version=1.2,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL
        )
