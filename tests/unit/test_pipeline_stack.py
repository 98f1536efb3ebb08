"""Snapshot tests for the pipeline stack."""

import pytest
from aws_cdk.assertions import Match


class TestPipeline:
    """Tests for the self-mutating pipeline."""

    def test_stack_properties(self, pipeline_stack):
        """Test stack name and termination protection."""
        assert pipeline_stack.stack_name == "stelo-web-pipeline"
        assert pipeline_stack.termination_protection is True

    def test_pipeline_name(self, pipeline_template):
        """Test the pipeline is named after the project."""
        pipeline_template.has_resource_properties("AWS::CodePipeline::Pipeline", {"Name": "stelo-web"})

    def test_artifact_key_rotation(self, pipeline_template):
        """Test cross-account artifact keys are rotated."""
        pipeline_template.has_resource_properties("AWS::KMS::Key", {"EnableKeyRotation": True})

    @pytest.mark.parametrize("phase", ["synth", "mutate", "assets"])
    def test_phase_log_groups(self, pipeline_template, phase):
        """Test every phase has its own log group kept six months."""
        pipeline_template.has_resource_properties("AWS::Logs::LogGroup", {
            "LogGroupName": f"/aws/codebuild/stelo-web-{phase}",
            "RetentionInDays": 180
        })

    def test_build_environment(self, pipeline_template, config):
        """Test CodeBuild projects run on small ARM instances with the pipeline variables."""
        pipeline_template.has_resource_properties("AWS::CodeBuild::Project", {
            "Environment": Match.object_like({
                "ComputeType": "BUILD_GENERAL1_SMALL",
                "Image": "aws/codebuild/amazonlinux2-aarch64-standard:3.0",
                "Type": "ARM_CONTAINER",
                "EnvironmentVariables": Match.array_with([
                    {"Name": "STELO_SITE_GIT_CONN_ARN", "Type": "PLAINTEXT", "Value": config.pipeline.connection_arn}
                ])
            })
        })
        pipeline_template.has_resource_properties("AWS::CodeBuild::Project", {
            "Environment": Match.object_like({
                "EnvironmentVariables": Match.array_with([
                    {"Name": "STELO_SITE_ACCOUNT", "Type": "PLAINTEXT", "Value": config.aws.account}
                ])
            })
        })

    def test_synth_commands(self, pipeline_template):
        """Test the synth project runs the configured commands."""
        pipeline_template.has_resource_properties("AWS::CodeBuild::Project", {
            "Source": Match.object_like({
                "BuildSpec": Match.serialized_json(Match.object_like({
                    "phases": Match.object_like({
                        "build": Match.object_like({
                            "commands": Match.array_with(["npm install -g aws-cdk", "pip install .", "cdk synth"])
                        })
                    })
                }))
            })
        })

    @pytest.mark.parametrize("action_name,repository", [
        ("cdk.stelo.me", "jfkisafk/cdk.stelo.me"),
        ("stelo.cdn", "jfkisafk/stelo.cdn"),
    ])
    def test_source_actions(self, pipeline_template, config, action_name, repository):
        """Test both repositories are checked out through the connection."""
        pipeline_template.has_resource_properties("AWS::CodePipeline::Pipeline", {
            "Stages": Match.array_with([Match.object_like({
                "Name": "Source",
                "Actions": Match.array_with([Match.object_like({
                    "Name": action_name,
                    "Configuration": Match.object_like({
                        "ConnectionArn": config.pipeline.connection_arn,
                        "FullRepositoryId": repository,
                        "BranchName": "main",
                        "OutputArtifactFormat": "CODEBUILD_CLONE_REF"
                    })
                })])
            })])
        })

    def test_global_wave(self, pipeline_stack):
        """Test the Global wave holds only the CDN stage."""
        assert pipeline_stack.wave.id == "Global"
        assert [stage.stage_name for stage in pipeline_stack.wave.stages] == ["stelo-web-cdn"]

    def test_stage_order(self, pipeline_template):
        """Test the CDN is deployed after self mutation and asset publishing."""
        pipeline = next(iter(pipeline_template.find_resources("AWS::CodePipeline::Pipeline").values()))
        names = [stage["Name"] for stage in pipeline["Properties"]["Stages"]]

        # A wave with a single stage is flattened into a stage named after it
        assert names[-3:] == ["UpdatePipeline", "Assets", "stelo-web-cdn"]
        assert "Global" not in names

    def test_cdn_stage(self, pipeline_stack):
        """Test the wave stage holds the CDN stack."""
        assert pipeline_stack.cdn_stage.stage_name == "stelo-web-cdn"
        assert pipeline_stack.cdn_stage.cdn_stack.stack_name == "stelo-web-cdn"

    def test_tags(self, pipeline_template):
        """Test the pipeline entity tag is propagated."""
        pipeline_template.has_resource_properties("AWS::CodeBuild::Project", {
            "Tags": Match.array_with([{"Key": "stelo:website:entity", "Value": "pipeline"}])
        })
