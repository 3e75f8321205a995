"""
Test data builders for environment configurations.
"""

import copy
from typing import Any, Dict

from network_planning.config import VpcConfig


BASE_CONTEXT: Dict[str, Any] = {
    'vpc_cidr_block': '10.0.0.0/16',
    'az_count': 2,
    'nat_gateway_count': 0,
    'create_public_subnets': False,
    'subnet_layers': {'app': 24, 'data': 26},
    'use_transit_gateway': False,
    'project_name': 'core',
    'tags': {'Project': 'core'},
}

TGW_ID = 'tgw-0123456789abcdef0'


def make_context(**overrides: Any) -> Dict[str, Any]:
    """Valid context block with overrides applied. None removes a key."""
    context = copy.deepcopy(BASE_CONTEXT)
    for key, value in overrides.items():
        if value is None:
            context.pop(key, None)
        else:
            context[key] = value
    return context


def make_config(**overrides: Any) -> VpcConfig:
    return VpcConfig.from_context(make_context(**overrides))


def make_tgw_config(**overrides: Any) -> VpcConfig:
    settings = {'use_transit_gateway': True, 'transit_gateway_id': TGW_ID}
    settings.update(overrides)
    return make_config(**settings)
