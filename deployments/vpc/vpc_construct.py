"""
VPC construct for the multi-AZ VPC stack.

This module realizes a NetworkPlan as an ec2.Vpc and maps every planned
subnet to the subnet CDK created for it.

Architecture:
- One subnet group per planned layer (optional public layer first)
- Public subnets never auto-assign public IPs
- DNS support and hostnames enabled
- Each subnet owns its route table unless the plan says otherwise

Follows steering rules:
- Infrastructure definition only (layout decisions live in network_planning)
- Explicit over implicit (all configurations declared)
"""

from typing import Dict, List

from aws_cdk import (
    aws_ec2 as ec2,
    Fn,
    Tags,
    Token,
)
from constructs import Construct

from network_planning.errors import TopologyError
from network_planning.naming import VPC_RESOURCE_REF, az_identifier
from network_planning.types import (
    NetworkPlan,
    SubnetInstance,
    SubnetKind,
    SubnetLayer,
    TagPlan,
)


SUBNET_TYPES = {
    SubnetKind.PUBLIC: ec2.SubnetType.PUBLIC,
    SubnetKind.PRIVATE_EGRESS: ec2.SubnetType.PRIVATE_WITH_EGRESS,
}


class VpcNetworkConstruct(Construct):
    """
    Construct that creates the VPC described by a NetworkPlan.

    Attributes:
        vpc: The ec2.Vpc
        subnets: Realized subnets keyed by planned subnet ref
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        network: NetworkPlan,
        **kwargs
    ) -> None:
        """
        Initialize VPC construct.

        Args:
            scope: CDK construct scope
            construct_id: Unique construct identifier
            network: Planned subnet layout

        Raises:
            TopologyError: If a planned subnet was not realized, which
                happens when the region offers fewer AZs than requested
        """
        super().__init__(scope, construct_id, **kwargs)

        self.network = network

        self.vpc = ec2.Vpc(
            self,
            'Vpc',
            ip_addresses=ec2.IpAddresses.cidr(network.vpc_cidr),
            enable_dns_hostnames=True,
            enable_dns_support=True,
            max_azs=network.az_count,
            nat_gateways=network.nat_gateway_count,
            subnet_configuration=[
                self._subnet_configuration(layer) for layer in network.layers
            ],
        )

        self.subnets: Dict[str, ec2.ISubnet] = self._index_subnets()

    @staticmethod
    def _subnet_configuration(layer: SubnetLayer) -> ec2.SubnetConfiguration:
        if layer.kind is SubnetKind.PUBLIC:
            return ec2.SubnetConfiguration(
                name=layer.name,
                cidr_mask=layer.mask_bits,
                subnet_type=SUBNET_TYPES[layer.kind],
                map_public_ip_on_launch=False,
            )
        return ec2.SubnetConfiguration(
            name=layer.name,
            cidr_mask=layer.mask_bits,
            subnet_type=SUBNET_TYPES[layer.kind],
        )

    def _index_subnets(self) -> Dict[str, ec2.ISubnet]:
        realized = {
            subnet.node.id: subnet
            for subnet in self.vpc.public_subnets + self.vpc.private_subnets
        }

        indexed = {}
        for spec in self.network.subnets:
            subnet = realized.get(spec.ref)
            if subnet is None:
                raise TopologyError(
                    f'Planned subnet {spec.ref} was not created; the region offers '
                    f'fewer than {self.network.az_count} availability zones',
                    {'subnet': spec.ref, 'azCount': self.network.az_count}
                )
            indexed[spec.ref] = subnet
        return indexed

    def subnet(self, ref: str) -> ec2.ISubnet:
        return self.subnets[ref]

    def route_table_id(self, route_table_ref: str) -> str:
        """Resolve a planned route table ref to its CloudFormation id."""
        subnet = self.subnets.get(route_table_ref)
        if subnet is None:
            raise TopologyError(
                f'Route table {route_table_ref} does not belong to any subnet in the VPC',
                {'routeTable': route_table_ref}
            )
        return subnet.route_table.route_table_id

    def public_instances(self) -> List[SubnetInstance]:
        return [self._instance(s) for s in self.vpc.public_subnets]

    def private_instances(self) -> List[SubnetInstance]:
        return [self._instance(s) for s in self.vpc.private_subnets]

    @staticmethod
    def _instance(subnet: ec2.ISubnet) -> SubnetInstance:
        zone = subnet.availability_zone
        if Token.is_unresolved(zone):
            # Env-agnostic stacks only know the zone at deploy time
            az_id = Fn.select(2, Fn.split('-', zone))
        else:
            az_id = az_identifier(zone)
        return SubnetInstance(name=subnet.node.id, az_identifier=az_id)

    def apply_name_tags(self, tag_plan: TagPlan) -> None:
        """Add the Name tag of every planned resource that has one."""
        vpc_name = tag_plan.name_of(VPC_RESOURCE_REF)
        if vpc_name:
            Tags.of(self.vpc).add('Name', vpc_name)

        for ref, subnet in self.subnets.items():
            name = tag_plan.name_of(ref)
            if name:
                Tags.of(subnet).add('Name', name)
