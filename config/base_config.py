"""
Configuration Management Module

This module defines the configuration structure for the stelo-web CDK
infrastructure. It uses Pydantic for data validation.

Structure:
- BaseConfig: Base class with naming and tagging helpers
- AWS Configuration: AwsConfig
- CDN Configuration: CdnConfig
- Pipeline Configuration: SourceConnectionConfig, PipelineConfig

Configurations can be overridden via YAML files per environment.
Example file structure:
```
config/
  └── environments/
      └── prod.yaml

```
"""

import re
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from aws_cdk import Tags, Stack
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_codebuild as codebuild
from aws_cdk import aws_logs as logs
from .enums import (
    AwsRegion,
    EnvironmentName
)

PLACEHOLDER_CONNECTION_ARN = "connectionArn"


class BaseConfig(BaseModel):
    """
    Base configuration with common methods.

    This class provides basic functionality like tag management
    and resource name generation.

    Attributes:
        env_name: Deployment environment (dev, prod)
        project_name: Project name, also used as the pipeline name
        app_tag: Value of the `stelo:app` tag put on every stack
    """
    env_name: EnvironmentName
    project_name: str
    app_tag: str = "website"

    @property
    def env_name_str(self) -> str:
        """Returns the environment name as a string."""
        return self.env_name.value

    def prefix(self, base: str) -> str:
        """Generates a standardized name for resources."""
        return f"{self.project_name}-{base}"

    def add_stack_global_tags(self, stack: Stack, entity: str):
        """Adds global tags and the website entity tag to a stack."""
        for key, value in self.tags.items():
            Tags.of(stack).add(key, value)
        Tags.of(stack).add("stelo:website:entity", entity)

    @property
    def tags(self):
        """Standardized tags to apply to all resources."""
        return {
            "stelo:app": self.app_tag,
            "EnvName": self.env_name_str,
            "ProjectName": self.project_name,
            "ManagedBy": "CDK"
        }


class AwsConfig(BaseModel):
    """
    Base AWS configuration.

    Attributes:
        account: AWS account ID, None for an environment-agnostic synth
        region: AWS deployment region
    """
    account: Optional[str] = None
    region: AwsRegion = AwsRegion.US_EAST_1

    @property
    def region_str(self) -> str:
        """Returns the region as a string."""
        return self.region.value


class CdnConfig(BaseModel):
    """
    CloudFront CDN configuration.

    Defines the encryption key, the logs and assets buckets, the DNS zone,
    the certificate and the distribution serving the site assets.

    Attributes:
        domain_name: Custom domain of the distribution and name of its hosted zone
        certificate_name: ACM certificate name
        key_alias: Alias of the shared KMS key
        logs_bucket_name: Bucket receiving S3 and CloudFront access logs
        assets_bucket_name: Origin bucket holding the site assets
        logs_transition_days: Days before logs move to infrequent access
        logs_expiration_days: Days before logs are deleted
        geo_denylist: Countries denied by the distribution
        cors_domains: Sibling domains allowed by CORS and CSP
        assets_dir: Explicit assets directory, overrides the two layouts below
        local_assets_dir: Assets directory for a local checkout
        pipeline_assets_dir: Assets directory inside the pipeline build
    """
    domain_name: str = "cdn.stelo.dev"
    certificate_name: str = "stelo-cdn"
    key_alias: str = Field(default="alias/stelo/web", pattern=r"^alias/[a-zA-Z0-9/_-]+$")

    logs_bucket_name: str = "access.logs.stelo.dev"
    assets_bucket_name: str = "stelo.dev"
    logs_transition_days: int = Field(default=30, ge=30)
    logs_expiration_days: int = 90

    default_root_object: str = "index.html"
    error_page_path: str = "/index.html"
    price_class: str = "PRICE_CLASS_200"
    geo_denylist: List[str] = Field(
        default_factory=lambda: ["CU", "IR", "KP", "SY", "UA", "CN", "PK"]
    )

    response_headers_policy_name: str = "stelo-cdn-cors"
    cors_domains: List[str] = Field(
        default_factory=lambda: ["stelo.info", "stelo.app", "stelo.dev", "stelo.me"],
        min_length=1
    )
    cors_max_age_seconds: int = 3600
    hsts_max_age_seconds: int = 31536000

    deployment_function_runtime: str = "python3.12"
    deployment_log_retention: str = "TWO_MONTHS"

    assets_dir: Optional[str] = None
    local_assets_dir: str = "../stelo.cdn/assets"
    pipeline_assets_dir: str = "../cdn/assets"

    @property
    def bucket_logs_prefix(self) -> str:
        return f"{self.assets_bucket_name}/bucket/"

    @property
    def distribution_logs_prefix(self) -> str:
        return f"{self.assets_bucket_name}/cdn/"

    @property
    def price_class_value(self) -> cloudfront.PriceClass:
        return getattr(cloudfront.PriceClass, self.price_class)

    @property
    def deployment_log_retention_value(self) -> logs.RetentionDays:
        return getattr(logs.RetentionDays, self.deployment_log_retention)

    @field_validator("geo_denylist")
    @classmethod
    def validate_geo_denylist(cls, value: List[str]) -> List[str]:
        """Validates that countries are unique two-letter ISO codes."""
        invalid = [code for code in value if not re.fullmatch(r"[A-Z]{2}", code)]
        if invalid:
            raise ValueError(f"geo_denylist contains invalid country codes: {invalid}")
        if len(set(value)) != len(value):
            raise ValueError(f"geo_denylist contains duplicates: {value}")
        return value

    @field_validator("price_class")
    @classmethod
    def validate_price_class(cls, value: str) -> str:
        if not hasattr(cloudfront.PriceClass, value):
            raise ValueError(f"Unknown CloudFront price class: {value}")
        return value

    @field_validator("deployment_log_retention")
    @classmethod
    def validate_log_retention(cls, value: str) -> str:
        if not hasattr(logs.RetentionDays, value):
            raise ValueError(f"Unknown log retention: {value}")
        return value

    @model_validator(mode='after')
    def validate_lifecycle(self) -> 'CdnConfig':
        """Validates that logs transition to infrequent access before they expire."""
        if self.logs_transition_days >= self.logs_expiration_days:
            raise ValueError(
                f"logs_transition_days ({self.logs_transition_days}) "
                f"must be less than logs_expiration_days ({self.logs_expiration_days})"
            )
        return self


class SourceConnectionConfig(BaseModel):
    """
    Source repository reached through a CodeStar connection.

    Attributes:
        owner: Repository owner
        repo: Repository name
        branch: Branch triggering the pipeline (default: "main")
        action_name: Pipeline action name (default: the repository name)
    """
    owner: str
    repo: str
    branch: str = "main"
    action_name: Optional[str] = None

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def name(self) -> str:
        return self.action_name or self.repo


class PipelineConfig(BaseModel):
    """
    Self-mutating CDK pipeline configuration.

    Attributes:
        connection_arn: CodeStar connection used by every source
        source: Repository holding this infrastructure definition
        additional_inputs: Checkout path of each extra repository, relative to the synth directory
        commands: Synth commands
        build_image: Name of a `LinuxArmBuildImage` constant
        compute_type: Name of a `ComputeType` constant
        log_retention: Name of a `RetentionDays` constant for the build log groups
    """
    connection_arn: str = Field(
        default=PLACEHOLDER_CONNECTION_ARN,
        description="CodeStar connection ARN"
    )
    source: SourceConnectionConfig = SourceConnectionConfig(owner="jfkisafk", repo="cdk.stelo.me")
    additional_inputs: Dict[str, SourceConnectionConfig] = Field(
        default_factory=lambda: {"../cdn": SourceConnectionConfig(owner="jfkisafk", repo="stelo.cdn")}
    )
    commands: List[str] = Field(
        default_factory=lambda: ["npm install -g aws-cdk", "pip install .", "cdk synth"],
        min_length=1
    )
    build_image: str = "AMAZON_LINUX_2_STANDARD_3_0"
    compute_type: str = "SMALL"
    log_retention: str = "SIX_MONTHS"

    @field_validator("connection_arn")
    @classmethod
    def validate_connection_arn(cls, value: str) -> str:
        if value == PLACEHOLDER_CONNECTION_ARN:
            return value
        if not re.fullmatch(
            r"arn:aws:(codestar-connections|codeconnections):[a-z0-9-]+:\d{12}:connection/[a-zA-Z0-9-]+",
            value
        ):
            raise ValueError(f"connection_arn is not a CodeStar connection ARN: {value}")
        return value

    @field_validator("build_image")
    @classmethod
    def validate_build_image(cls, value: str) -> str:
        if not hasattr(codebuild.LinuxArmBuildImage, value):
            raise ValueError(f"Unknown ARM build image: {value}")
        return value

    @field_validator("compute_type")
    @classmethod
    def validate_compute_type(cls, value: str) -> str:
        if not hasattr(codebuild.ComputeType, value):
            raise ValueError(f"Unknown compute type: {value}")
        return value

    @field_validator("log_retention")
    @classmethod
    def validate_log_retention(cls, value: str) -> str:
        if not hasattr(logs.RetentionDays, value):
            raise ValueError(f"Unknown log retention: {value}")
        return value

    @model_validator(mode='after')
    def validate_additional_inputs(self) -> 'PipelineConfig':
        """Validates that every additional input path has its own repository."""
        seen = {self.source.repository}
        for path, connection in self.additional_inputs.items():
            if not path or path in (".", "./") or path.startswith("/"):
                raise ValueError(f"Additional input path must be a relative directory: {path!r}")
            if connection.repository in seen:
                raise ValueError(
                    f"Repository {connection.repository} is already checked out; "
                    f"cannot map it to {path!r}"
                )
            seen.add(connection.repository)
        return self

    @property
    def build_image_value(self) -> codebuild.IBuildImage:
        return getattr(codebuild.LinuxArmBuildImage, self.build_image)

    @property
    def compute_type_value(self) -> codebuild.ComputeType:
        return getattr(codebuild.ComputeType, self.compute_type)

    @property
    def log_retention_value(self) -> logs.RetentionDays:
        return getattr(logs.RetentionDays, self.log_retention)


class InfrastructureConfig(BaseConfig):
    """
    Complete infrastructure configuration.

    This class groups all configurations needed to deploy
    the pipeline and the CDN it delivers.

    Attributes:
        aws: Base AWS configuration
        cdn: CloudFront CDN configuration
        pipeline: Pipeline configuration

    Example:
        ```yaml
        # config/environments/prod.yaml
        aws:
          region: us-east-1

        cdn:
          domain_name: "cdn.example.dev"
          assets_bucket_name: "example.dev"
          cors_domains:
            - example.dev
            - example.app

        pipeline:
          source:
            owner: "my-org"
            repo: "infrastructure"
          additional_inputs:
            "../cdn":
              owner: "my-org"
              repo: "site"
        ```
    """
    aws: AwsConfig
    cdn: CdnConfig
    pipeline: PipelineConfig

    @model_validator(mode='after')
    def validate_pipeline_assets_dir(self) -> 'InfrastructureConfig':
        """Validates that the pipeline assets directory is inside an additional input."""
        assets_dir = self.cdn.pipeline_assets_dir.rstrip("/")
        if not any(
            assets_dir == path.rstrip("/") or assets_dir.startswith(path.rstrip("/") + "/")
            for path in self.pipeline.additional_inputs
        ):
            raise ValueError(
                f"pipeline_assets_dir ({self.cdn.pipeline_assets_dir}) must be inside one of "
                f"the additional inputs {sorted(self.pipeline.additional_inputs)}"
            )
        return self
