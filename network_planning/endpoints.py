"""
Endpoint and flow-log planning.

These plans never influence the subnet layout or routing. They only carry
configuration through to the constructs that create VPC endpoints and the
encrypted flow-log destination.
"""

from typing import List, Optional

from .config import VpcConfig
from .types import EndpointPlan, FlowLogPlan


# Interface endpoints Session Manager needs to reach instances in private subnets
SESSION_MANAGER_SERVICES = ('ssm', 'ssmmessages', 'ec2')

FLOW_LOG_RETENTION_DAYS = 365


def plan_endpoints(config: VpcConfig, env_name: str) -> Optional[EndpointPlan]:
    """
    Decide which VPC endpoints to create.

    Returns:
        EndpointPlan, or None when no endpoint is enabled
    """
    toggles = config.endpoints
    if not toggles.any_enabled:
        return None

    gateway_services: List[str] = []
    if toggles.s3:
        gateway_services.append('s3')
    if toggles.dynamodb:
        gateway_services.append('dynamodb')

    interface_services = SESSION_MANAGER_SERVICES if toggles.session_manager else ()
    security_group_name = None
    if interface_services:
        security_group_name = f'vpc-endpoints-{config.project_name}-{env_name}-sg'

    return EndpointPlan(
        gateway_services=tuple(gateway_services),
        interface_services=tuple(interface_services),
        security_group_name=security_group_name,
    )


def plan_flow_logs(config: VpcConfig, env_name: str) -> FlowLogPlan:
    """Flow logs are always on: all traffic, to an encrypted log group."""
    return FlowLogPlan(
        log_group_name=f'/vpc/flowlogs/{config.project_name}-{env_name}',
        retention_days=FLOW_LOG_RETENTION_DAYS,
        traffic_type='ALL',
        key_alias=f'vpc-flowlogs-{config.project_name}-{env_name}',
        encryption_key_arn=config.encryption_key_arn,
    )
