"""
Shared type definitions for VPC network planning.

VpcContext describes the raw per-environment block read from CDK context.
Every other type here is an immutable plan value object: computed once per
run, never mutated, and consumed by the CDK constructs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict, Dict, List, Mapping, Optional, Tuple, Union


# Name given to the public subnet group; private groups are named by layer
PUBLIC_LAYER_NAME = 'public'

# Destination of the default route installed toward the transit gateway
DEFAULT_ROUTE_CIDR = '0.0.0.0/0'

# Reference every transit gateway route depends on
TGW_ATTACHMENT_REF = 'TgwAttachment'


class VpcContext(TypedDict, total=False):
    """Raw environment block from cdk.json context."""
    vpc_cidr_block: str
    az_count: int
    nat_gateway_count: int
    create_public_subnets: bool
    public_subnet_mask_bits: int
    subnet_layers: Dict[str, Union[int, str]]
    use_transit_gateway: bool
    transit_gateway_id: str
    additional_cidrs: List[str]
    public_subnet_with_tgw_enabled: bool
    s3_vpc_endpoint_enabled: bool
    dynamodb_vpc_endpoint_enabled: bool
    session_manager_vpc_endpoints_enabled: bool
    encryption_key: str
    project_name: str
    tags: Dict[str, str]


class SubnetKind(str, Enum):
    """Kind of subnet group, mirroring the CDK subnet types in use."""
    PUBLIC = 'PUBLIC'
    PRIVATE_EGRESS = 'PRIVATE_WITH_EGRESS'


@dataclass(frozen=True)
class SubnetLayer:
    """One subnet group, before expansion across availability zones."""
    name: str
    mask_bits: int
    kind: SubnetKind


@dataclass(frozen=True)
class SubnetSpec:
    """
    One planned subnet instance: a layer placed in one availability zone.

    Attributes:
        layer_name: Logical layer the subnet belongs to
        mask_bits: CIDR mask of the subnet
        kind: Public or private-with-egress
        az_index: Zero-based availability zone index
        route_table_ref: Route table shared with other subnets, if any.
            When unset the subnet owns its route table.
    """
    layer_name: str
    mask_bits: int
    kind: SubnetKind
    az_index: int
    route_table_ref: Optional[str] = None

    @property
    def ref(self) -> str:
        # Same id CDK gives the realized subnet construct
        return f'{self.layer_name}Subnet{self.az_index + 1}'

    @property
    def route_table(self) -> str:
        return self.route_table_ref or self.ref

    @property
    def is_public(self) -> bool:
        return self.kind is SubnetKind.PUBLIC


@dataclass(frozen=True)
class NetworkPlan:
    """VPC-level CIDR plus the ordered subnet layout."""
    vpc_cidr: str
    az_count: int
    nat_gateway_count: int
    layers: Tuple[SubnetLayer, ...]
    subnets: Tuple[SubnetSpec, ...]

    @property
    def public_subnets(self) -> Tuple[SubnetSpec, ...]:
        return tuple(s for s in self.subnets if s.is_public)

    @property
    def private_subnets(self) -> Tuple[SubnetSpec, ...]:
        return tuple(s for s in self.subnets if not s.is_public)

    def subnets_in_layer(self, layer_name: str) -> Tuple[SubnetSpec, ...]:
        return tuple(s for s in self.subnets if s.layer_name == layer_name)


@dataclass(frozen=True)
class RouteEntry:
    """
    A single route toward the transit gateway.

    depends_on names the resource that must exist before the route is
    created; the CDK layer turns it into a node dependency.
    """
    construct_id: str
    route_table_ref: str
    destination: str
    depends_on: str = TGW_ATTACHMENT_REF


@dataclass(frozen=True)
class GatewayAttachment:
    """Transit gateway attachment scoped to the last layer's subnets."""
    transit_gateway_id: str
    subnet_refs: Tuple[str, ...]
    ref: str = TGW_ATTACHMENT_REF


@dataclass(frozen=True)
class RoutingPlan:
    """Route wiring toward a transit gateway."""
    attachment: GatewayAttachment
    default_routes: Tuple[RouteEntry, ...]
    additional_routes: Tuple[RouteEntry, ...] = ()

    @property
    def transit_gateway_id(self) -> str:
        return self.attachment.transit_gateway_id

    @property
    def routes(self) -> Tuple[RouteEntry, ...]:
        return self.default_routes + self.additional_routes


@dataclass(frozen=True)
class EndpointPlan:
    """
    VPC endpoints to create. Absent (None) when every toggle is off.

    Interface endpoints share one security group that allows HTTPS to and
    from the VPC CIDR only.
    """
    gateway_services: Tuple[str, ...]
    interface_services: Tuple[str, ...]
    security_group_name: Optional[str] = None


@dataclass(frozen=True)
class FlowLogPlan:
    """
    VPC flow log destination.

    encryption_key_arn is passed through from configuration untouched; when
    it is None a new key is created.
    """
    log_group_name: str
    retention_days: int
    traffic_type: str
    key_alias: str
    encryption_key_arn: Optional[str] = None

    @property
    def create_key(self) -> bool:
        return self.encryption_key_arn is None


@dataclass(frozen=True)
class SubnetInstance:
    """A realized subnet as seen by the naming rules: its name and AZ id."""
    name: str
    az_identifier: str


@dataclass(frozen=True)
class TagPlan:
    """
    Tags to apply, keyed by resource reference.

    resource_tags values already include the global tags, with the resource's
    Name tag on top. Both maps are read-only views.
    """
    global_tags: Mapping[str, str]
    resource_tags: Mapping[str, Mapping[str, str]]
    warnings: Tuple = field(default_factory=tuple)

    def name_of(self, resource_ref: str) -> Optional[str]:
        return self.resource_tags.get(resource_ref, {}).get('Name')
