from enum import Enum


class EnvironmentName(str, Enum):
    """Deployment environments known to the configuration loader."""
    DEV = "dev"
    PROD = "prod"


class AwsRegion(str, Enum):
    """CloudFront only accepts certificates issued in us-east-1."""
    US_EAST_1 = "us-east-1"
