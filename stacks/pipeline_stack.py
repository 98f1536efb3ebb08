from aws_cdk import Environment, Stack, RemovalPolicy
from aws_cdk import aws_codebuild as codebuild
from aws_cdk import aws_logs as logs
from aws_cdk import pipelines
from config.base_config import InfrastructureConfig, SourceConnectionConfig
from constructs import Construct
from stacks.cdn_stack import CdnStage


class PipelineStack(Stack):
    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: InfrastructureConfig,
                 env: Environment = None,
                 **kwargs) -> None:
        super().__init__(
            scope, construct_id,
            stack_name=config.prefix("pipeline"),
            description=f"Stack to manage {config.project_name} websites pipeline",
            termination_protection=True,
            env=env,
            **kwargs
        )
        self.config = config
        self.pipeline = self._create_pipeline()

        self.wave = self.pipeline.add_wave("Global")
        self.cdn_stage = CdnStage(self, config=self.config, env=env)
        self.wave.add_stage(self.cdn_stage)

        self.config.add_stack_global_tags(self, entity="pipeline")

    def _create_log_group(self, id: str, phase: str) -> codebuild.LoggingOptions:
        """Create the log group of one pipeline phase."""
        log_group = logs.LogGroup(
            self, id,
            log_group_name=f"/aws/codebuild/{self.config.prefix(phase)}",
            retention=self.config.pipeline.log_retention_value,
            removal_policy=RemovalPolicy.DESTROY
        )
        return codebuild.LoggingOptions(
            cloud_watch=codebuild.CloudWatchLoggingOptions(log_group=log_group)
        )

    def _create_source(self, connection: SourceConnectionConfig) -> pipelines.CodePipelineSource:
        return pipelines.CodePipelineSource.connection(
            connection.repository,
            connection.branch,
            connection_arn=self.config.pipeline.connection_arn,
            code_build_clone_output=True,
            action_name=connection.name
        )

    def _create_pipeline(self) -> pipelines.CodePipeline:
        pipeline_config = self.config.pipeline

        # Read back by app.py when the synth step runs inside CodeBuild
        environment_variables = {
            "STELO_SITE_GIT_CONN_ARN": codebuild.BuildEnvironmentVariable(value=pipeline_config.connection_arn),
            "STELO_SITE_ACCOUNT": codebuild.BuildEnvironmentVariable(value=self.account)
        }

        return pipelines.CodePipeline(
            self, "CodePipeline",
            pipeline_name=self.config.project_name,
            reuse_cross_region_support_stacks=True,
            cross_account_keys=True,
            self_mutation=True,
            enable_key_rotation=True,
            publish_assets_in_parallel=False,
            use_change_sets=True,
            code_build_defaults=pipelines.CodeBuildOptions(
                build_environment=codebuild.BuildEnvironment(
                    build_image=pipeline_config.build_image_value,
                    compute_type=pipeline_config.compute_type_value,
                    environment_variables=environment_variables
                )
            ),
            synth_code_build_defaults=pipelines.CodeBuildOptions(
                logging=self._create_log_group("SynthCodeBuildLogGroup", "synth")
            ),
            self_mutation_code_build_defaults=pipelines.CodeBuildOptions(
                logging=self._create_log_group("SelfMutateCodeBuildLogGroup", "mutate")
            ),
            asset_publishing_code_build_defaults=pipelines.CodeBuildOptions(
                logging=self._create_log_group("AssetsCodeBuildLogGroup", "assets")
            ),
            synth=pipelines.ShellStep(
                "Synth",
                input=self._create_source(pipeline_config.source),
                additional_inputs={
                    path: self._create_source(connection)
                    for path, connection in pipeline_config.additional_inputs.items()
                },
                commands=pipeline_config.commands
            )
        )
