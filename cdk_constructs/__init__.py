"""
CDK Constructs Package

This package contains the CDK constructs composing the stelo-web CDN.
"""

from .site_storage import SiteStorage
from .assets_deployment import AssetsDeployment, resolve_assets_dir
from .cdn_distribution import CdnDistribution
from .response_headers import (
    cors_allowed_origins,
    content_security_policy,
    create_response_headers_policy
)

__all__ = [
    'SiteStorage',
    'AssetsDeployment',
    'resolve_assets_dir',
    'CdnDistribution',
    'cors_allowed_origins',
    'content_security_policy',
    'create_response_headers_policy'
]
