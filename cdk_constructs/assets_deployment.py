import os
from aws_cdk import RemovalPolicy, Stack
from aws_cdk import aws_iam as iam
from aws_cdk import aws_kms as kms
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_logs as logs
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_s3_deployment as s3deploy
from cdk_nag import NagSuppressions, NagPackSuppression
from constructs import Construct, IConstruct
from config.base_config import InfrastructureConfig

BUCKET_DEPLOYMENT_PROVIDER_PREFIX = "Custom::CDKBucketDeployment"
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def resolve_assets_dir(config: InfrastructureConfig, environ=None) -> str:
    """Return the assets directory for the current checkout layout."""
    environ = os.environ if environ is None else environ
    if config.cdn.assets_dir:
        assets_dir = config.cdn.assets_dir
    elif environ.get("CODEBUILD_BUILD_ARN"):
        assets_dir = config.cdn.pipeline_assets_dir
    else:
        assets_dir = config.cdn.local_assets_dir
    return os.path.normpath(os.path.join(PROJECT_ROOT, assets_dir))


class AssetsDeployment(Construct):
    """
    Upload of the site assets into the origin bucket.

    The bucket deployment singleton provider is renamed and pinned, and its
    logs go to a dedicated log group encrypted with the shared key.
    """

    def __init__(self,
                 scope: Construct,
                 id: str,
                 destination_bucket: s3.IBucket,
                 encryption_key: kms.IKey,
                 config: InfrastructureConfig,
                 **kwargs) -> None:
        super().__init__(scope, id)
        self.config = config
        self.function_name = config.prefix("assets-deployment")

        self.deployment = s3deploy.BucketDeployment(
            self, "AssetsDeployment",
            sources=[s3deploy.Source.asset(resolve_assets_dir(config))],
            destination_bucket=destination_bucket
        )

        provider = self._find_provider()
        self.function = self._configure_function(provider)
        self.log_group = logs.LogGroup(
            self, "AssetsDeploymentFunctionLogs",
            log_group_name=f"/aws/lambda/{self.function_name}",
            retention=config.cdn.deployment_log_retention_value,
            removal_policy=RemovalPolicy.DESTROY,
            encryption_key=encryption_key
        )
        # The function must not create its own unencrypted log group first
        self.deployment.node.find_child("CustomResource").node.add_dependency(self.log_group)
        self._configure_role(provider)

    def _find_provider(self) -> IConstruct:
        """The provider is a stack-level singleton, not a child of the deployment."""
        for child in Stack.of(self).node.children:
            if child.node.id.startswith(BUCKET_DEPLOYMENT_PROVIDER_PREFIX):
                return child
        raise ValueError("Bucket deployment provider function not found in stack")

    def _configure_function(self, provider: IConstruct) -> lambda_.CfnFunction:
        function: lambda_.CfnFunction = provider.node.find_child("Resource")
        function.runtime = self.config.cdn.deployment_function_runtime
        function.function_name = self.function_name

        NagSuppressions.add_resource_suppressions(provider, [
            NagPackSuppression(id="AwsSolutions-L1", reason="Runtime is pinned for the bucket deployment provider")
        ])
        return function

    def _configure_role(self, provider: IConstruct):
        service_role = provider.node.find_child("ServiceRole")
        role: iam.CfnRole = service_role.node.default_child
        role.role_name = f"{self.function_name}-role"

        NagSuppressions.add_resource_suppressions(service_role, [
            NagPackSuppression(id="AwsSolutions-IAM4", reason="Managed policies are auto-added"),
            NagPackSuppression(id="AwsSolutions-IAM5", reason="Policies are auto-added")
        ], apply_to_children=True)
