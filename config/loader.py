# config/loader.py
import logging
import os
import yaml
from typing import Dict, Any, Mapping, Optional
from .base_config import InfrastructureConfig, AwsConfig, CdnConfig, PipelineConfig

logger = logging.getLogger(__name__)

# Process environment variables layered over the YAML file: (section, key)
ENVIRONMENT_OVERRIDES = {
    "STELO_SITE_ACCOUNT": ("aws", "account"),
    "STELO_SITE_GIT_CONN_ARN": ("pipeline", "connection_arn"),
    "STELO_SITE_ASSETS_DIR": ("cdn", "assets_dir"),
}


class ConfigLoader:
    def __init__(self, env_name: str, project_name: str, environ: Optional[Mapping[str, str]] = None):
        self.env_name = env_name
        self.project_name = project_name
        self.environ = os.environ if environ is None else environ
        self.base_path = os.path.dirname(os.path.abspath(__file__))

    def load_environment_config(self) -> Dict[str, Any]:
        """Load the configuration from the YAML file."""
        config_path = os.path.join(self.base_path, 'environments', f'{self.env_name}.yaml')
        logger.info(f"Loading {self.env_name} configuration from {config_path}")
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def apply_environment_overrides(self, env_config: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay values coming from the process environment."""
        for variable, (section, key) in ENVIRONMENT_OVERRIDES.items():
            value = self.environ.get(variable)
            if value:
                logger.info(f"Using {variable} for {section}.{key}")
                env_config.setdefault(section, {})[key] = value
        return env_config

    def create_config(self) -> InfrastructureConfig:
        """Create the complete configuration."""
        env_config = self.apply_environment_overrides(self.load_environment_config())

        config = {
            'env_name': self.env_name,
            'project_name': self.project_name,
            'aws': AwsConfig(**env_config.get('aws', {})),
            'cdn': CdnConfig(**env_config.get('cdn', {})),
            'pipeline': PipelineConfig(**env_config.get('pipeline', {}))
        }

        return InfrastructureConfig(**config)
