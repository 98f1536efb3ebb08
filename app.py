#!/usr/bin/env python3
import logging
from aws_cdk import App, Environment
from config.loader import ConfigLoader
from stacks.pipeline_stack import PipelineStack

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = App()

env_name = app.node.try_get_context('env') or 'prod'
project_name = app.node.try_get_context('project') or 'stelo-web'
# Load configuration
config_loader = ConfigLoader(env_name, project_name)
config = config_loader.create_config()

logger.info(
    f"Synthesizing {config.prefix('pipeline')} for account "
    f"{config.aws.account or '<unresolved>'} in {config.aws.region_str}"
)

# The pipeline deploys the CDN stage and itself
pipeline_stack = PipelineStack(
    app,
    "Pipeline",
    env=Environment(
        account=config.aws.account,
        region=config.aws.region_str
    ),
    config=config
)

app.synth()
