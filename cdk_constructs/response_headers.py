"""
Response Headers Utility Functions

CORS origins and the Content-Security-Policy sources are both derived from
the same list of sibling domains, so the two policies always agree.
"""

from typing import List, Sequence
from aws_cdk import Duration
from aws_cdk import aws_cloudfront as cloudfront
from constructs import Construct

ORIGIN_SCHEMES = ("https://", "https://*.")


def cors_allowed_origins(domains: Sequence[str]) -> List[str]:
    """
    Build the CORS allow-list for a set of sibling domains.

    Every domain is allowed on its apex and on any of its subdomains, over
    HTTPS only.

    Args:
        domains: Canonical sibling domains (e.g. ["stelo.dev", "stelo.me"])

    Returns:
        List[str]: Origins in domain order, apex first

    Example:
        ```python
        cors_allowed_origins(["stelo.dev"])
        # ["https://stelo.dev", "https://*.stelo.dev"]
        ```
    """
    return [f"{scheme}{domain}" for domain in domains for scheme in ORIGIN_SCHEMES]


def content_security_policy(domains: Sequence[str]) -> str:
    """Build a CSP allowing resources from the sibling domains only."""
    sources = " ".join(["'self'", *cors_allowed_origins(domains)])
    return "; ".join([
        f"default-src {sources}",
        f"img-src {sources} data:",
        "object-src 'none'",
        "base-uri 'self'",
        "frame-ancestors 'self'",
    ])


def create_response_headers_policy(
    scope: Construct,
    id: str,
    policy_name: str,
    domains: Sequence[str],
    cors_max_age: Duration,
    hsts_max_age: Duration,
) -> cloudfront.ResponseHeadersPolicy:
    """
    Create the CORS and security headers policy attached to the distribution.

    Args:
        scope: The CDK construct scope
        id: Unique identifier for the policy
        policy_name: CloudFront policy name
        domains: Sibling domains allowed by CORS and CSP
        cors_max_age: Preflight cache duration
        hsts_max_age: Strict-Transport-Security max age

    Returns:
        cloudfront.ResponseHeadersPolicy: The created policy
    """
    return cloudfront.ResponseHeadersPolicy(
        scope, id,
        response_headers_policy_name=policy_name,
        comment="Adds CORS and security headers",
        cors_behavior=cloudfront.ResponseHeadersCorsBehavior(
            access_control_allow_credentials=False,
            access_control_allow_headers=["*"],
            access_control_allow_methods=["GET", "HEAD"],
            access_control_allow_origins=cors_allowed_origins(domains),
            access_control_max_age=cors_max_age,
            origin_override=True
        ),
        security_headers_behavior=cloudfront.ResponseSecurityHeadersBehavior(
            content_security_policy=cloudfront.ResponseHeadersContentSecurityPolicy(
                content_security_policy=content_security_policy(domains),
                override=True
            ),
            content_type_options=cloudfront.ResponseHeadersContentTypeOptions(override=True),
            frame_options=cloudfront.ResponseHeadersFrameOptions(
                frame_option=cloudfront.HeadersFrameOption.SAMEORIGIN,
                override=True
            ),
            referrer_policy=cloudfront.ResponseHeadersReferrerPolicy(
                referrer_policy=cloudfront.HeadersReferrerPolicy.STRICT_ORIGIN_WHEN_CROSS_ORIGIN,
                override=True
            ),
            strict_transport_security=cloudfront.ResponseHeadersStrictTransportSecurity(
                access_control_max_age=hsts_max_age,
                include_subdomains=True,
                override=True
            ),
            xss_protection=cloudfront.ResponseHeadersXSSProtection(
                protection=True,
                mode_block=True,
                override=True
            )
        )
    )
