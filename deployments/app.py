#!/usr/bin/env python3
"""
CDK Application Entry Point.

This is the main entry point for the CDK application. It creates the VPC
stack for one environment, selected with the envName context value.

Usage:
    # Synthesize CloudFormation templates for the development environment
    cdk synth

    # Deploy a specific environment
    cdk deploy -c envName=prod

Environment Configuration:
    Per-environment settings live in cdk.json under the environment name
    (dev, stage, prod). The AWS account and region come from:
    - CDK_DEFAULT_ACCOUNT: AWS account ID
    - CDK_DEFAULT_REGION: AWS region

Exit codes:
    0: Synthesized successfully
    1: Invalid or missing configuration (ConfigError)
    2: Topology cannot be realized (TopologyError)
"""

import os
import sys

from aws_cdk import App, Environment

from network_planning.errors import ConfigError, TopologyError
from vpc.vpc_stack import VpcStack


def main() -> int:
    app = App()

    env_name = app.node.try_get_context('envName') or 'dev'

    # Create environment configuration if account and region are provided
    account = os.environ.get('CDK_DEFAULT_ACCOUNT')
    region = os.environ.get('CDK_DEFAULT_REGION')
    env = None
    if account and region:
        env = Environment(account=account, region=region)

    # Planning errors are already logged by the stack
    try:
        VpcStack(
            app,
            'CdkVpcStack',
            env_name=env_name,
            env=env,
            stack_name=f'vpc-stack-{env_name}',
            description='Multi-AZ VPC with transit gateway routing, endpoints and flow logs',
        )
    except ConfigError:
        return 1
    except TopologyError:
        return 2

    app.synth()
    return 0


if __name__ == '__main__':
    sys.exit(main())
