from aws_cdk import Aspects, CfnOutput, Environment, Fn, Stack, Stage
from cdk_nag import AwsSolutionsChecks, NagReportFormat
from constructs import Construct
from cdk_constructs.site_storage import SiteStorage
from cdk_constructs.assets_deployment import AssetsDeployment
from cdk_constructs.cdn_distribution import CdnDistribution
from config.base_config import InfrastructureConfig


class CdnStack(Stack):
    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: InfrastructureConfig,
                 **kwargs) -> None:
        super().__init__(
            scope, construct_id,
            stack_name=config.prefix("cdn"),
            description=f"CDN resources for {config.cdn.assets_bucket_name} websites",
            termination_protection=True,
            **kwargs
        )
        self.config = config
        Aspects.of(self).add(AwsSolutionsChecks(verbose=True, report_formats=[NagReportFormat.JSON]))

        self.storage = SiteStorage(self, "SiteStorage", config=self.config)

        self.assets_deployment = AssetsDeployment(
            self, "AssetsDeployment",
            destination_bucket=self.storage.assets_bucket,
            encryption_key=self.storage.encryption_key,
            config=self.config
        )

        self.cdn_distribution = CdnDistribution(
            self, "CdnDistribution",
            assets_bucket=self.storage.assets_bucket,
            logs_bucket=self.storage.logs_bucket,
            config=self.config
        )
        self.distribution = self.cdn_distribution.distribution

        CfnOutput(
            self, "DistributionId",
            value=self.distribution.distribution_id,
            description="CloudFront distribution ID"
        )

        CfnOutput(
            self, "HostedZoneNameServers",
            value=Fn.join(", ", self.cdn_distribution.hosted_zone.hosted_zone_name_servers),
            description=f"Name servers to delegate {self.config.cdn.domain_name} to"
        )

        # Global tags for the stack
        self.config.add_stack_global_tags(self, entity="infrastructure")


class CdnStage(Stage):
    def __init__(self,
                 scope: Construct,
                 config: InfrastructureConfig,
                 env: Environment = None,
                 **kwargs) -> None:
        super().__init__(scope, "CDN", stage_name=config.prefix("cdn"), env=env, **kwargs)
        self.cdn_stack = CdnStack(self, "CDNStack", config=config, env=env)
