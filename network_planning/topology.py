"""
Subnet topology planning.

Expands the configured layers into one subnet per (layer, availability zone)
pair. Order is layer-major, AZ-minor: the optional public layer first, then
the private layers in the order they were declared. The last private layer's
subnets therefore always close the plan.
"""

from typing import List

from .config import VpcConfig
from .types import (
    NetworkPlan,
    PUBLIC_LAYER_NAME,
    SubnetKind,
    SubnetLayer,
    SubnetSpec,
)


def plan_layers(config: VpcConfig) -> List[SubnetLayer]:
    """Subnet groups in creation order, before AZ expansion."""
    layers: List[SubnetLayer] = []

    if config.create_public_subnets:
        layers.append(SubnetLayer(
            name=PUBLIC_LAYER_NAME,
            mask_bits=config.public_subnet_mask_bits,
            kind=SubnetKind.PUBLIC,
        ))

    for name, mask_bits in config.subnet_layers:
        layers.append(SubnetLayer(
            name=name,
            mask_bits=mask_bits,
            kind=SubnetKind.PRIVATE_EGRESS,
        ))

    return layers


def plan_topology(config: VpcConfig) -> NetworkPlan:
    """
    Compute the subnet layout for a configuration.

    Produces exactly az_count * number-of-layers subnet specs. Whether the
    region actually offers az_count zones is checked when the VPC is
    realized, not here.

    Args:
        config: Validated environment configuration

    Returns:
        NetworkPlan with layers and their per-AZ subnet instances
    """
    layers = plan_layers(config)

    subnets = tuple(
        SubnetSpec(
            layer_name=layer.name,
            mask_bits=layer.mask_bits,
            kind=layer.kind,
            az_index=az_index,
        )
        for layer in layers
        for az_index in range(config.az_count)
    )

    return NetworkPlan(
        vpc_cidr=config.vpc_cidr,
        az_count=config.az_count,
        nat_gateway_count=config.nat_gateway_count,
        layers=tuple(layers),
        subnets=subnets,
    )
