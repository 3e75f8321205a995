"""
Transit gateway routing planning.

Given a network plan, decides which subnets the transit gateway attaches to
and which route tables get routes toward it:

1. The attachment covers every subnet of the last configured layer.
2. Every subnet's route table gets a default route (0.0.0.0/0).
3. Additional CIDRs go to every route table when public subnets are allowed
   to route through the gateway, otherwise to private route tables only.

Routes are deduplicated per (route table, destination) because a route
table can be shared between subnets and duplicate routes are rejected at
deploy time. Every route declares a dependency on the attachment.
"""

from typing import Iterable, List, Optional, Set, Tuple

from .config import VpcConfig
from .errors import ConfigError, TopologyError
from .types import (
    DEFAULT_ROUTE_CIDR,
    GatewayAttachment,
    NetworkPlan,
    RouteEntry,
    RoutingPlan,
    SubnetSpec,
)


def select_attachment_subnets(config: VpcConfig, network: NetworkPlan) -> Tuple[SubnetSpec, ...]:
    """
    Subnets of the last configured layer, across all AZs.

    Raises:
        TopologyError: If no layer is configured or the layer has no subnets
    """
    last_layer = config.last_layer_name
    if last_layer is None:
        raise TopologyError('No subnet layers configured for the transit gateway attachment')

    selected = tuple(
        s for s in network.subnets_in_layer(last_layer) if not s.is_public
    )
    if not selected:
        raise TopologyError(
            f'No subnets found for the last layer: {last_layer}',
            {'layer': last_layer}
        )
    return selected


def additional_route_scope(config: VpcConfig, network: NetworkPlan) -> Tuple[SubnetSpec, ...]:
    """Subnets whose route tables receive the additional CIDR routes."""
    if config.public_subnet_with_tgw_enabled:
        return network.public_subnets + network.private_subnets
    return network.private_subnets


def plan_routing(config: VpcConfig, network: NetworkPlan) -> Optional[RoutingPlan]:
    """
    Compute the transit gateway routing plan.

    Returns:
        RoutingPlan, or None when the configuration does not use a
        transit gateway

    Raises:
        ConfigError: If the transit gateway id is missing
        TopologyError: If the last layer has no subnets
    """
    if not config.use_transit_gateway:
        return None

    if not config.transit_gateway_id:
        raise ConfigError('transit_gateway_id is required when use_transit_gateway is true')

    attachment = GatewayAttachment(
        transit_gateway_id=config.transit_gateway_id,
        subnet_refs=tuple(s.ref for s in select_attachment_subnets(config, network)),
    )

    seen: Set[Tuple[str, str]] = set()

    default_routes = _dedupe(
        (
            RouteEntry(
                construct_id=f'TransitGatewayRoute{index}',
                route_table_ref=subnet.route_table,
                destination=DEFAULT_ROUTE_CIDR,
                depends_on=attachment.ref,
            )
            for index, subnet in enumerate(network.subnets)
        ),
        seen,
    )

    additional_routes: Tuple[RouteEntry, ...] = ()
    if config.additional_cidrs:
        additional_routes = _dedupe(
            (
                RouteEntry(
                    construct_id=f'AdditionalCidrRoute-{subnet.ref}-{cidr_index}',
                    route_table_ref=subnet.route_table,
                    destination=cidr,
                    depends_on=attachment.ref,
                )
                for subnet in additional_route_scope(config, network)
                for cidr_index, cidr in enumerate(config.additional_cidrs)
            ),
            seen,
        )

    return RoutingPlan(
        attachment=attachment,
        default_routes=default_routes,
        additional_routes=additional_routes,
    )


def _dedupe(entries: Iterable[RouteEntry], seen: Set[Tuple[str, str]]) -> Tuple[RouteEntry, ...]:
    # First occurrence of a (route table, destination) pair wins
    kept: List[RouteEntry] = []
    for entry in entries:
        key = (entry.route_table_ref, entry.destination)
        if key in seen:
            continue
        seen.add(key)
        kept.append(entry)
    return tuple(kept)
