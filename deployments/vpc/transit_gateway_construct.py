"""
Transit gateway construct for the multi-AZ VPC stack.

Attaches the VPC to an existing transit gateway and installs the routes of a
RoutingPlan. The attachment only spans the last layer's subnets; routes are
created after the attachment exists.
"""

from typing import Dict

from aws_cdk import (
    aws_ec2 as ec2,
)
from constructs import Construct, IDependable

from network_planning.types import RoutingPlan

from .vpc_construct import VpcNetworkConstruct


class TransitGatewayConstruct(Construct):
    """
    Construct that wires a VPC to a transit gateway.

    Attributes:
        attachment: The transit gateway VPC attachment
        routes: Created routes keyed by construct id
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        network: VpcNetworkConstruct,
        routing: RoutingPlan,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.attachment = ec2.CfnTransitGatewayVpcAttachment(
            self,
            routing.attachment.ref,
            transit_gateway_id=routing.transit_gateway_id,
            vpc_id=network.vpc.vpc_id,
            subnet_ids=[
                network.subnet(ref).subnet_id for ref in routing.attachment.subnet_refs
            ],
        )
        self.attachment.node.add_dependency(network.vpc)

        dependencies: Dict[str, IDependable] = {routing.attachment.ref: self.attachment}

        self.routes: Dict[str, ec2.CfnRoute] = {}
        for entry in routing.routes:
            route = ec2.CfnRoute(
                self,
                entry.construct_id,
                route_table_id=network.route_table_id(entry.route_table_ref),
                destination_cidr_block=entry.destination,
                transit_gateway_id=routing.transit_gateway_id,
            )
            route.node.add_dependency(dependencies[entry.depends_on])
            self.routes[entry.construct_id] = route
