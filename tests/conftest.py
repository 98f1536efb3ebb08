"""Shared fixtures for the CDK stack tests."""

import json
from pathlib import Path

import pytest
from aws_cdk import App, Environment
from aws_cdk.assertions import Template

from config.loader import ConfigLoader
from stacks.cdn_stack import CdnStack
from stacks.pipeline_stack import PipelineStack

PROJECT_ROOT = Path(__file__).resolve().parents[1]

ACCOUNT = "012345678901"
REGION = "us-east-1"
CONNECTION_ARN = "arn:aws:codeconnections:us-east-1:012345678901:connection/2a30a395-8d38-43ab-827b-f39a83c9986a"


@pytest.fixture(scope="session")
def cdk_context():
    """Feature flags used by the CDK toolkit."""
    with open(PROJECT_ROOT / "cdk.json") as f:
        return json.load(f)["context"]


@pytest.fixture(scope="session")
def assets_dir(tmp_path_factory):
    """Minimal site build to upload."""
    path = tmp_path_factory.mktemp("assets")
    (path / "index.html").write_text("<html><body>stelo</body></html>")
    return path


@pytest.fixture(scope="session")
def environ(assets_dir):
    return {
        "STELO_SITE_ACCOUNT": ACCOUNT,
        "STELO_SITE_GIT_CONN_ARN": CONNECTION_ARN,
        "STELO_SITE_ASSETS_DIR": str(assets_dir),
    }


@pytest.fixture(scope="session")
def config(environ):
    return ConfigLoader("prod", "stelo-web", environ=environ).create_config()


@pytest.fixture(scope="session")
def env():
    return Environment(account=ACCOUNT, region=REGION)


@pytest.fixture(scope="session")
def cdn_stack(cdk_context, config, env, tmp_path_factory):
    app = App(context=cdk_context, outdir=str(tmp_path_factory.mktemp("cdn.out")))
    return CdnStack(app, "CDNStack", config=config, env=env)


@pytest.fixture(scope="session")
def cdn_template(cdn_stack):
    return Template.from_stack(cdn_stack)


@pytest.fixture(scope="session")
def pipeline_stack(cdk_context, config, env, tmp_path_factory):
    app = App(context=cdk_context, outdir=str(tmp_path_factory.mktemp("pipeline.out")))
    return PipelineStack(app, "Pipeline", config=config, env=env)


@pytest.fixture(scope="session")
def pipeline_template(pipeline_stack):
    return Template.from_stack(pipeline_stack)
