from aws_cdk import Duration
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_cloudfront as cloudfront
from aws_cdk import aws_cloudfront_origins as origins
from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_route53 as route53
from aws_cdk import aws_route53_targets as targets
from cdk_nag import NagSuppressions, NagPackSuppression
from constructs import Construct
from config.base_config import InfrastructureConfig
from .response_headers import create_response_headers_policy


class CdnDistribution(Construct):
    def __init__(self,
                 scope: Construct,
                 id: str,
                 assets_bucket: s3.IBucket,
                 logs_bucket: s3.IBucket,
                 config: InfrastructureConfig,
                 **kwargs) -> None:
        super().__init__(scope, id)
        cdn = config.cdn

        # Public zone delegated for the CDN domain, with an Amazon-only CAA record
        self.hosted_zone = route53.PublicHostedZone(
            self, "AssetsHostedZone",
            zone_name=cdn.domain_name,
            caa_amazon=True,
            comment=f"Delegation for {cdn.domain_name} resources"
        )

        # Validated in the same zone that hosts the alias record
        self.certificate = acm.Certificate(
            self, "AssetsCertificate",
            domain_name=cdn.domain_name,
            certificate_name=cdn.certificate_name,
            validation=acm.CertificateValidation.from_dns(self.hosted_zone)
        )

        self.oac = cloudfront.S3OriginAccessControl(
            self, "OriginAccessControl",
            description=f"sigv4 for {cdn.assets_bucket_name} origin bucket",
            signing=cloudfront.Signing.SIGV4_ALWAYS
        )

        self.response_headers_policy = create_response_headers_policy(
            self, "ResponseHeadersPolicy",
            policy_name=cdn.response_headers_policy_name,
            domains=cdn.cors_domains,
            cors_max_age=Duration.seconds(cdn.cors_max_age_seconds),
            hsts_max_age=Duration.seconds(cdn.hsts_max_age_seconds)
        )

        # The origin grants s3:GetObject to CloudFront scoped to this distribution
        self.distribution = cloudfront.Distribution(
            self, "AssetsDistro",
            comment="Distribution for getting assets",
            domain_names=[cdn.domain_name],
            certificate=self.certificate,
            minimum_protocol_version=cloudfront.SecurityPolicyProtocol.TLS_V1_2_2021,
            default_root_object=cdn.default_root_object,
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_control(
                    assets_bucket,
                    origin_access_control=self.oac
                ),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                allowed_methods=cloudfront.AllowedMethods.ALLOW_GET_HEAD_OPTIONS,
                cached_methods=cloudfront.CachedMethods.CACHE_GET_HEAD_OPTIONS,
                cache_policy=cloudfront.CachePolicy.CACHING_OPTIMIZED,
                compress=True,
                response_headers_policy=self.response_headers_policy
            ),
            http_version=cloudfront.HttpVersion.HTTP2_AND_3,
            enable_ipv6=True,
            price_class=cdn.price_class_value,
            enable_logging=True,
            log_bucket=logs_bucket,
            log_file_prefix=cdn.distribution_logs_prefix,
            # Single-page app: private objects the origin refuses fall back to the index
            error_responses=[
                cloudfront.ErrorResponse(
                    http_status=403,
                    response_http_status=200,
                    response_page_path=cdn.error_page_path
                )
            ],
            geo_restriction=cloudfront.GeoRestriction.denylist(*cdn.geo_denylist)
        )

        NagSuppressions.add_resource_suppressions(self.distribution, [
            NagPackSuppression(id="AwsSolutions-CFR2", reason="WAF protection is expensive"),
            NagPackSuppression(id="AwsSolutions-CFR6", reason="Origin access control replaces origin access identity")
        ])

        self.alias_record = route53.ARecord(
            self, "AssetsAlias",
            zone=self.hosted_zone,
            record_name=self.hosted_zone.zone_name,
            # TODO: delete_existing is deprecated, drop it before moving to aws-cdk-lib v3
            # once the apex record is owned by this stack in every environment
            delete_existing=True,
            comment="Routes traffic to assets distribution",
            target=route53.RecordTarget.from_alias(
                targets.CloudFrontTarget(self.distribution)
            )
        )
