# infra_cdk/log_summary_stack.py
from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    aws_events as events,
    aws_events_targets as targets,
    aws_lambda as _lambda,
    aws_s3 as s3,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as apigw_integrations,
    CfnOutput
)
from constructs import Construct

LAMBDA_ASSET_EXCLUDES = [
    "cdk.out", ".venv", ".git", "tests", "cli", "infra_cdk", "lambda_layer", "*.md", "*.txt",
]


class LogSummaryStack(Stack):
    """
    Deploys the daily log summary: the log bucket, the summary function,
    an HTTP trigger and a nightly schedule.
    """

    def __init__(self, scope: Construct, construct_id: str, *,
                 log_folder_name: str = "", output_folder_name: str = "output/",
                 layer_asset_path: str = "lambda_layer", code_asset_path: str = ".", **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # === Storage ===
        log_bucket = s3.Bucket(self, "LogBucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            removal_policy=RemovalPolicy.RETAIN,
        )

        # === Shared dependency layer (pydantic-settings and friends) ===
        common_layer = _lambda.LayerVersion(self, "CommonLayer",
            code=_lambda.Code.from_asset(layer_asset_path),
            compatible_runtimes=[_lambda.Runtime.PYTHON_3_12],
            description="Third-party packages for the log summary function"
        )

        # === Summary function ===
        log_summary_function = _lambda.Function(self, "LogSummaryFunction",
            runtime=_lambda.Runtime.PYTHON_3_12,
            code=_lambda.Code.from_asset(code_asset_path, exclude=LAMBDA_ASSET_EXCLUDES),
            handler="lambdas.log_summary.app.handler",
            timeout=Duration.minutes(10),
            memory_size=1024,
            environment={
                # the execution role supplies the credentials
                "STORAGE_CONNECTION_STRING": f"Region={self.region}",
                "LOG_BUCKET": log_bucket.bucket_name,
                "LOG_FOLDER_NAME": log_folder_name,
                "OUTPUT_FOLDER_NAME": output_folder_name,
                "MAX_WORKERS": "4",
            },
            layers=[common_layer]
        )
        log_bucket.grant_read(log_summary_function, f"{log_folder_name}*")
        log_bucket.grant_put(log_summary_function, f"{output_folder_name}*")

        # === HTTP trigger ===
        http_api = apigw.HttpApi(self, "LogSummaryApi")
        http_api.add_routes(
            path="/summary",
            methods=[apigw.HttpMethod.GET, apigw.HttpMethod.POST],
            integration=apigw_integrations.HttpLambdaIntegration("SummaryIntegration", handler=log_summary_function)
        )

        # === Nightly run, shortly before the UTC day ends ===
        nightly_rule = events.Rule(self, "NightlySummaryRule",
            schedule=events.Schedule.cron(minute="55", hour="23"),
        )
        nightly_rule.add_target(targets.LambdaFunction(log_summary_function))

        # === Outputs ===
        CfnOutput(self, "SummaryEndpointUrl", value=f"{http_api.url}summary", description="The URL that triggers a summary run.")
        CfnOutput(self, "LogBucketName", value=log_bucket.bucket_name, description="The bucket holding log exports and summaries.")
