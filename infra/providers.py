"""AWS provider configuration with optional cross-account role assumption."""

import pulumi
import pulumi_aws as aws

from infra.config import StackConfig


def create_aws_provider(config: StackConfig) -> aws.Provider:
    """Create the AWS provider the network is provisioned with.

    When ``roleArn`` is configured the provider assumes that role, so the
    network can be provisioned in another AWS account.
    """
    assume_roles = None
    if config.role_arn:
        assume_roles = [
            aws.ProviderAssumeRoleArgs(
                role_arn=config.role_arn,
                external_id=config.external_id,
                session_name=f"pulumi-{pulumi.get_stack()}",
                duration="1h",
            )
        ]

    return aws.Provider(
        f"{config.name}-aws",
        region=config.aws_region,
        assume_roles=assume_roles,
        default_tags=aws.ProviderDefaultTagsArgs(
            tags={
                "ManagedBy": "Pulumi",
                "Environment": config.environment,
                "Network": config.name,
                "Stack": pulumi.get_stack(),
            },
        ),
    )
