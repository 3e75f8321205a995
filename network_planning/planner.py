"""
Deployment planning entry point.

Runs the planners in dependency order and bundles their output:

    VpcConfig -> plan_topology -> NetworkPlan
              -> plan_routing (transit gateway only) -> RoutingPlan
              -> build_tag_plan (from the NetworkPlan's subnets) -> TagPlan
              -> plan_endpoints / plan_flow_logs

The result is a pure function of the configuration and environment name;
planning the same input twice yields equal plans.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .config import VpcConfig, load_environment_config
from .endpoints import plan_endpoints, plan_flow_logs
from .errors import PlanningError
from .logger import PlanLogger, create_plan_logger
from .naming import az_identifier, build_tag_plan
from .routing import plan_routing
from .topology import plan_topology
from .types import (
    EndpointPlan,
    FlowLogPlan,
    NetworkPlan,
    RouteEntry,
    RoutingPlan,
    SubnetInstance,
    TagPlan,
)


@dataclass(frozen=True)
class DeploymentPlan:
    """Everything the CDK stack needs to realize one environment."""
    env_name: str
    config: VpcConfig
    network: NetworkPlan
    routing: Optional[RoutingPlan]
    endpoints: Optional[EndpointPlan]
    flow_logs: FlowLogPlan
    tags: TagPlan

    def to_dict(self) -> Dict[str, Any]:
        """Render the plan as plain JSON-serializable data."""
        return {
            'environment': self.env_name,
            'vpc': {
                'cidr': self.network.vpc_cidr,
                'azCount': self.network.az_count,
                'natGateways': self.network.nat_gateway_count,
                'tags': dict(self.tags.resource_tags.get('vpc', {})),
            },
            'subnets': [
                {
                    'ref': s.ref,
                    'layer': s.layer_name,
                    'kind': s.kind.value,
                    'cidrMask': s.mask_bits,
                    'azIndex': s.az_index,
                    'routeTable': s.route_table,
                    'tags': dict(self.tags.resource_tags.get(s.ref, {})),
                }
                for s in self.network.subnets
            ],
            'transitGateway': _routing_to_dict(self.routing),
            'endpoints': None if self.endpoints is None else {
                'gateway': list(self.endpoints.gateway_services),
                'interface': list(self.endpoints.interface_services),
                'securityGroupName': self.endpoints.security_group_name,
            },
            'flowLogs': {
                'logGroupName': self.flow_logs.log_group_name,
                'retentionDays': self.flow_logs.retention_days,
                'trafficType': self.flow_logs.traffic_type,
                'keyAlias': self.flow_logs.key_alias,
                'encryptionKeyArn': self.flow_logs.encryption_key_arn,
                'createKey': self.flow_logs.create_key,
            },
            'warnings': [w.message for w in self.tags.warnings],
        }


def planned_subnet_instances(
    network: NetworkPlan,
    availability_zones: Optional[Sequence[str]] = None,
) -> List[SubnetInstance]:
    """
    Subnet instances as they will be realized, named like CDK names them.

    Without zone names (env-agnostic planning) the AZ id falls back to
    'az<n>'.
    """
    instances = []
    for subnet in network.subnets:
        if availability_zones and subnet.az_index < len(availability_zones):
            az_id = az_identifier(availability_zones[subnet.az_index])
        else:
            az_id = f'az{subnet.az_index + 1}'
        instances.append(SubnetInstance(name=subnet.ref, az_identifier=az_id))
    return instances


def build_deployment_plan(
    config: VpcConfig,
    env_name: str,
    availability_zones: Optional[Sequence[str]] = None,
) -> DeploymentPlan:
    """
    Plan every resource for an environment.

    Raises:
        ConfigError: If transit gateway settings are incomplete
        TopologyError: If the attachment layer has no subnets
    """
    network = plan_topology(config)
    routing = plan_routing(config, network)

    instances = dict(
        (instance.name, instance)
        for instance in planned_subnet_instances(network, availability_zones)
    )
    tags = build_tag_plan(
        config,
        env_name,
        public_instances=[instances[s.ref] for s in network.public_subnets],
        private_instances=[instances[s.ref] for s in network.private_subnets],
    )

    return DeploymentPlan(
        env_name=env_name,
        config=config,
        network=network,
        routing=routing,
        endpoints=plan_endpoints(config, env_name),
        flow_logs=plan_flow_logs(config, env_name),
        tags=tags,
    )


def plan_environment(
    env_name: str,
    context: Optional[Dict[str, Any]],
    logger: PlanLogger = None,
    availability_zones: Optional[Sequence[str]] = None,
) -> DeploymentPlan:
    """
    Load an environment's configuration and plan it, logging the run.

    Fatal errors are logged and re-raised unchanged; naming warnings are
    logged and the plan is returned.
    """
    logger = logger or create_plan_logger(env_name)
    logger.log_plan_start()

    try:
        config = load_environment_config(env_name, context)
        plan = build_deployment_plan(config, env_name, availability_zones)
    except PlanningError as error:
        logger.log_planning_error(error)
        raise

    for warning in plan.tags.warnings:
        logger.log_warning(warning)

    logger.log_plan_complete(
        project=config.project_name,
        subnets=len(plan.network.subnets),
        defaultRoutes=len(plan.routing.default_routes) if plan.routing else 0,
        additionalRoutes=len(plan.routing.additional_routes) if plan.routing else 0,
        warnings=len(plan.tags.warnings),
    )
    return plan


def _route_to_dict(route: RouteEntry) -> Dict[str, str]:
    return {
        'id': route.construct_id,
        'routeTable': route.route_table_ref,
        'destination': route.destination,
        'dependsOn': route.depends_on,
    }


def _routing_to_dict(routing: Optional[RoutingPlan]) -> Optional[Dict[str, Any]]:
    if routing is None:
        return None
    return {
        'id': routing.transit_gateway_id,
        'attachment': {
            'ref': routing.attachment.ref,
            'subnets': list(routing.attachment.subnet_refs),
        },
        'defaultRoutes': [_route_to_dict(r) for r in routing.default_routes],
        'additionalRoutes': [_route_to_dict(r) for r in routing.additional_routes],
    }
