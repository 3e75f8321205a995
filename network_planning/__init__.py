"""VPC topology and routing planning for the multi-AZ VPC stack."""

from .config import (
    EndpointToggles,
    VpcConfig,
    load_environment_config,
    validate_vpc_context,
)

from .errors import (
    PlanningError,
    ConfigError,
    TopologyError,
    NamingWarning,
)

from .types import (
    SubnetKind,
    SubnetLayer,
    SubnetSpec,
    NetworkPlan,
    RouteEntry,
    GatewayAttachment,
    RoutingPlan,
    EndpointPlan,
    FlowLogPlan,
    SubnetInstance,
    TagPlan,
)

from .topology import plan_topology
from .routing import plan_routing
from .naming import resolve_layer, build_tag_plan
from .endpoints import plan_endpoints, plan_flow_logs
from .planner import DeploymentPlan, build_deployment_plan, plan_environment

__all__ = [
    # Config
    'EndpointToggles',
    'VpcConfig',
    'load_environment_config',
    'validate_vpc_context',
    # Errors
    'PlanningError',
    'ConfigError',
    'TopologyError',
    'NamingWarning',
    # Types
    'SubnetKind',
    'SubnetLayer',
    'SubnetSpec',
    'NetworkPlan',
    'RouteEntry',
    'GatewayAttachment',
    'RoutingPlan',
    'EndpointPlan',
    'FlowLogPlan',
    'SubnetInstance',
    'TagPlan',
    # Planners
    'plan_topology',
    'plan_routing',
    'resolve_layer',
    'build_tag_plan',
    'plan_endpoints',
    'plan_flow_logs',
    'DeploymentPlan',
    'build_deployment_plan',
    'plan_environment',
]
