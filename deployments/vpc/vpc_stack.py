"""
Multi-AZ VPC CDK Stack.

This module defines the CDK stack that realizes the VPC plan for one
environment. The layout, routing and naming are computed by
network_planning; the stack only turns the plans into constructs.

Stack naming convention: vpc-stack-<env> (e.g., vpc-stack-prod)

Architecture:
- VPC with one subnet per (layer, AZ), optional public layer
- Optional transit gateway attachment on the last layer, with default and
  additional CIDR routes
- Optional gateway/interface VPC endpoints
- Flow logs to a KMS-encrypted CloudWatch Logs log group
- CloudFormation outputs for the VPC id and CIDR

Usage Example:
    from aws_cdk import App
    from vpc.vpc_stack import VpcStack

    app = App()

    # Configuration comes from cdk.json context, keyed by environment name
    VpcStack(app, 'CdkVpcStack', env_name='prod', stack_name='vpc-stack-prod')

    app.synth()
"""

from typing import List, Optional

from aws_cdk import (
    Stack,
    CfnOutput,
    Tags,
    Token,
)
from constructs import Construct

from network_planning.errors import PlanningError
from network_planning.logger import create_plan_logger
from network_planning.naming import build_tag_plan
from network_planning.planner import plan_environment

from .vpc_construct import VpcNetworkConstruct
from .transit_gateway_construct import TransitGatewayConstruct
from .endpoints_construct import VpcEndpointsConstruct
from .flow_logs_construct import FlowLogsConstruct


class VpcStack(Stack):
    """
    CDK stack for one environment's VPC.

    Attributes:
        plan: The DeploymentPlan the stack was built from
        network: VPC construct
        transit_gateway: Transit gateway construct (None when unused)
        endpoints: VPC endpoints construct (None when no endpoint is enabled)
        flow_logs: Flow logs construct
        tag_plan: Tags applied to the VPC and subnets
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        env_name: str = 'dev',
        **kwargs
    ) -> None:
        """
        Initialize the VPC stack.

        Args:
            scope: CDK app scope
            construct_id: Stack identifier
            env_name: Environment name; selects the cdk.json context block
            **kwargs: Additional stack properties (env, stack_name, description, ...)

        Raises:
            ConfigError: If the environment's configuration is missing or invalid
            TopologyError: If the plan cannot be realized
        """
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = env_name
        self.logger = create_plan_logger(env_name)

        # Fails fast before any construct is declared
        self.plan = plan_environment(
            env_name,
            self.node.try_get_context(env_name),
            logger=self.logger,
            availability_zones=self._known_zones(),
        )

        try:
            self._build()
        except PlanningError as error:
            self.logger.log_planning_error(error, stage='provision')
            raise

    def _known_zones(self) -> Optional[List[str]]:
        """AZ names the VPC will use, or None when they are deploy-time tokens."""
        zones = self.availability_zones
        if any(Token.is_unresolved(zone) for zone in zones):
            return None
        return zones

    def _build(self) -> None:
        plan = self.plan

        # 1. VPC and subnets
        self.network = VpcNetworkConstruct(self, 'Network', network=plan.network)
        vpc = self.network.vpc

        # 2. Transit gateway attachment and routes
        self.transit_gateway = None
        if plan.routing is not None:
            self.transit_gateway = TransitGatewayConstruct(
                self,
                'TransitGateway',
                network=self.network,
                routing=plan.routing,
            )

        # 3. Name tags. Env-agnostic stacks only learn their AZ ids at deploy
        # time, so their tags are rebuilt from the realized subnets. Subnet
        # names match the plan, so the naming warnings were already logged.
        if self._known_zones() is not None:
            self.tag_plan = plan.tags
        else:
            self.tag_plan = build_tag_plan(
                plan.config,
                self.env_name,
                public_instances=self.network.public_instances(),
                private_instances=self.network.private_instances(),
            )
        self.network.apply_name_tags(self.tag_plan)

        # 4. VPC endpoints
        self.endpoints = None
        if plan.endpoints is not None:
            self.endpoints = VpcEndpointsConstruct(
                self,
                'Endpoints',
                vpc=vpc,
                endpoints=plan.endpoints,
            )

        # 5. Flow logs
        self.flow_logs = FlowLogsConstruct(
            self,
            'FlowLogs',
            vpc=vpc,
            flow_logs=plan.flow_logs,
        )

        # Stack-level tags; configured tags win over the defaults
        Tags.of(self).add('Environment', self.env_name)
        Tags.of(self).add('ManagedBy', 'CDK')
        for key, value in self.tag_plan.global_tags.items():
            Tags.of(self).add(key, value)

        CfnOutput(
            self,
            'VPCId',
            description='VPC ID',
            value=vpc.vpc_id,
            export_name=f'{self.stack_name}-VPCId',
        )

        CfnOutput(
            self,
            'VPCCidr',
            description='VPC CIDR',
            value=vpc.vpc_cidr_block,
            export_name=f'{self.stack_name}-VPCCidr',
        )
