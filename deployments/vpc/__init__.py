"""Multi-AZ VPC CDK constructs."""

from .vpc_construct import VpcNetworkConstruct
from .transit_gateway_construct import TransitGatewayConstruct
from .endpoints_construct import VpcEndpointsConstruct
from .flow_logs_construct import FlowLogsConstruct
from .vpc_stack import VpcStack

__all__ = [
    "VpcNetworkConstruct",
    "TransitGatewayConstruct",
    "VpcEndpointsConstruct",
    "FlowLogsConstruct",
    "VpcStack",
]
