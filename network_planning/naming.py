"""
Resource naming and tagging.

Name tags follow the convention:
- VPC:            vpc-<project>-<env>
- Public subnet:  public-<project>-<env>-<az>
- Private subnet: private-<project>-<env>-<layer>-<az>

where <az> is the last dash-separated part of the availability zone
(us-east-1a -> 1a). A private subnet's layer is recovered from its name
alone. When that fails the subnet keeps only the global tags and a warning
is recorded; the run carries on.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Sequence

from .config import VpcConfig
from .errors import NamingWarning
from .types import SubnetInstance, TagPlan


VPC_RESOURCE_REF = 'vpc'


def resolve_layer(subnet_name: str, layer_names: Sequence[str]) -> Optional[str]:
    """
    Find the configured layer a subnet belongs to.

    Matching is by substring containment so provider-generated prefixes and
    suffixes (e.g. 'appSubnet1') still resolve. When several layers match,
    the first declared one wins.

    Returns:
        The layer name, or None when no layer matches. Never raises.
    """
    if not isinstance(subnet_name, str):
        return None
    for layer in layer_names:
        if isinstance(layer, str) and layer and layer in subnet_name:
            return layer
    return None


def az_identifier(availability_zone: str) -> str:
    """Short AZ id used in names: 'eu-west-1b' -> '1b'."""
    return availability_zone.split('-')[-1]


def vpc_name_tag(project_name: str, env_name: str) -> str:
    return f'vpc-{project_name}-{env_name}'


def public_subnet_name_tag(project_name: str, env_name: str, az_id: str) -> str:
    return f'public-{project_name}-{env_name}-{az_id}'


def private_subnet_name_tag(project_name: str, env_name: str, layer: str, az_id: str) -> str:
    return f'private-{project_name}-{env_name}-{layer}-{az_id}'


def build_tag_plan(
    config: VpcConfig,
    env_name: str,
    public_instances: Iterable[SubnetInstance],
    private_instances: Iterable[SubnetInstance],
) -> TagPlan:
    """
    Compute the tags for the VPC and its realized subnets.

    Each resource's tag set is computed independently from the configuration
    and the subnet itself. Resource references are the subnet names.

    Args:
        config: Validated environment configuration
        env_name: Environment name used in Name tags
        public_instances: Realized public subnets
        private_instances: Realized private subnets

    Returns:
        TagPlan with per-resource tags and any naming warnings
    """
    global_tags = dict(config.tags)
    resource_tags: Dict[str, Dict[str, str]] = {
        VPC_RESOURCE_REF: {
            **global_tags,
            'Name': vpc_name_tag(config.project_name, env_name),
        }
    }
    warnings: List[NamingWarning] = []

    for instance in public_instances:
        resource_tags[instance.name] = {
            **global_tags,
            'Name': public_subnet_name_tag(config.project_name, env_name, instance.az_identifier),
        }

    for instance in private_instances:
        layer = resolve_layer(instance.name, config.layer_names)
        if layer is None:
            warnings.append(NamingWarning(
                subnet_name=instance.name,
                message=f'Unable to determine layer name for private subnet with ID: {instance.name}',
            ))
            resource_tags[instance.name] = dict(global_tags)
            continue
        resource_tags[instance.name] = {
            **global_tags,
            'Name': private_subnet_name_tag(
                config.project_name, env_name, layer, instance.az_identifier
            ),
        }

    return TagPlan(
        global_tags=MappingProxyType(global_tags),
        resource_tags=MappingProxyType({
            ref: MappingProxyType(tags) for ref, tags in resource_tags.items()
        }),
        warnings=tuple(warnings),
    )
