"""
VPC endpoint construct for the multi-AZ VPC stack.

Creates the gateway endpoints (S3, DynamoDB) and the Session Manager
interface endpoints (SSM, SSM Messages, EC2) listed in an EndpointPlan.

Architecture:
- Gateway endpoints attach to the VPC route tables
- Interface endpoints live in the private-with-egress subnets
- Interface endpoints share one security group: HTTPS in and out,
  restricted to the VPC CIDR
- Private DNS enabled so SDK default endpoints resolve privately
"""

from typing import Dict

from aws_cdk import (
    aws_ec2 as ec2,
)
from constructs import Construct

from network_planning.types import EndpointPlan


GATEWAY_ENDPOINTS = {
    's3': ('S3VpcEndpoint', ec2.GatewayVpcEndpointAwsService.S3),
    'dynamodb': ('DynamoDbVpcEndpoint', ec2.GatewayVpcEndpointAwsService.DYNAMODB),
}

INTERFACE_ENDPOINTS = {
    'ssm': ('SsmEndpoint', ec2.InterfaceVpcEndpointAwsService.SSM),
    'ssmmessages': ('SsmMessagesEndpoint', ec2.InterfaceVpcEndpointAwsService.SSM_MESSAGES),
    'ec2': ('Ec2Endpoint', ec2.InterfaceVpcEndpointAwsService.EC2),
}


class VpcEndpointsConstruct(Construct):
    """
    Construct that creates the planned VPC endpoints.

    Attributes:
        gateway_endpoints: Gateway endpoints keyed by service name
        interface_endpoints: Interface endpoints keyed by service name
        security_group: Security group for interface endpoints (None if
            no interface endpoint is planned)
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.Vpc,
        endpoints: EndpointPlan,
        **kwargs
    ) -> None:
        """
        Initialize VPC endpoints construct.

        Args:
            scope: CDK construct scope
            construct_id: Unique construct identifier
            vpc: VPC to attach the endpoints to
            endpoints: Planned endpoints
        """
        super().__init__(scope, construct_id, **kwargs)

        self.gateway_endpoints: Dict[str, ec2.GatewayVpcEndpoint] = {}
        for service in endpoints.gateway_services:
            endpoint_id, aws_service = GATEWAY_ENDPOINTS[service]
            endpoint = ec2.GatewayVpcEndpoint(
                self,
                endpoint_id,
                vpc=vpc,
                service=aws_service,
            )
            endpoint.node.add_dependency(vpc)
            self.gateway_endpoints[service] = endpoint

        self.security_group = None
        self.interface_endpoints: Dict[str, ec2.InterfaceVpcEndpoint] = {}
        if not endpoints.interface_services:
            return

        self.security_group = ec2.SecurityGroup(
            self,
            'VpcEndpointSecurityGroup',
            vpc=vpc,
            description='Security group for VPC endpoints',
            allow_all_outbound=False,
            security_group_name=endpoints.security_group_name,
        )
        self.security_group.add_ingress_rule(
            ec2.Peer.ipv4(vpc.vpc_cidr_block),
            ec2.Port.tcp(443),
            'Allow inbound HTTPS from VPC',
        )
        self.security_group.add_egress_rule(
            ec2.Peer.ipv4(vpc.vpc_cidr_block),
            ec2.Port.tcp(443),
            'Allow outbound HTTPS to VPC',
        )

        for service in endpoints.interface_services:
            endpoint_id, aws_service = INTERFACE_ENDPOINTS[service]
            self.interface_endpoints[service] = ec2.InterfaceVpcEndpoint(
                self,
                endpoint_id,
                vpc=vpc,
                service=aws_service,
                security_groups=[self.security_group],
                private_dns_enabled=True,
                subnets=ec2.SubnetSelection(
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS
                ),
            )
