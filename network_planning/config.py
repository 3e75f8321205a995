"""
Environment configuration for the VPC planner.

This module turns the raw CDK context block for one environment into a typed,
immutable VpcConfig. Validation collects every field-level problem before
failing, so a broken cdk.json is reported in one pass.

Follows steering rules:
- Fail fast on invalid input
- Explicit over implicit (unknown keys are rejected, not ignored)
- Return detailed validation errors
"""

import ipaddress
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ConfigError
from .types import PUBLIC_LAYER_NAME, VpcContext


# AWS accepts subnet masks between /16 and /28
MIN_MASK_BITS = 16
MAX_MASK_BITS = 28

ALLOWED_FIELDS = frozenset(VpcContext.__annotations__)

CIDR_MESSAGE = 'Must be an IPv4 CIDR block with an explicit prefix and no host bits set'

BOOLEAN_FIELDS = (
    'create_public_subnets',
    'use_transit_gateway',
    'public_subnet_with_tgw_enabled',
    's3_vpc_endpoint_enabled',
    'dynamodb_vpc_endpoint_enabled',
    'session_manager_vpc_endpoints_enabled',
)


@dataclass(frozen=True)
class EndpointToggles:
    """Which VPC endpoints to create."""
    s3: bool = False
    dynamodb: bool = False
    session_manager: bool = False

    @property
    def any_enabled(self) -> bool:
        return self.s3 or self.dynamodb or self.session_manager


@dataclass(frozen=True)
class VpcConfig:
    """
    Validated configuration for one environment.

    subnet_layers keeps the declared order; the last entry is the layer the
    transit gateway attaches to.
    """
    vpc_cidr: str
    az_count: int
    project_name: str
    nat_gateway_count: int = 0
    create_public_subnets: bool = False
    public_subnet_mask_bits: Optional[int] = None
    subnet_layers: Tuple[Tuple[str, int], ...] = ()
    use_transit_gateway: bool = False
    transit_gateway_id: Optional[str] = None
    additional_cidrs: Tuple[str, ...] = ()
    public_subnet_with_tgw_enabled: bool = False
    endpoints: EndpointToggles = field(default_factory=EndpointToggles)
    encryption_key_arn: Optional[str] = None
    tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def layer_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.subnet_layers)

    @property
    def last_layer_name(self) -> Optional[str]:
        if not self.subnet_layers:
            return None
        return self.subnet_layers[-1][0]

    @classmethod
    def from_context(cls, raw: Dict[str, Any]) -> 'VpcConfig':
        """
        Build a VpcConfig from a raw context block.

        Raises:
            ConfigError: If validation fails. details['errors'] lists every
                field-level problem found.
        """
        errors = validate_vpc_context(raw)
        if errors:
            fields = ', '.join(sorted({e['field'] for e in errors}))
            raise ConfigError(
                f'Invalid configuration: {fields}',
                {'errors': errors}
            )

        return cls(
            vpc_cidr=str(_parse_cidr(raw['vpc_cidr_block'])),
            az_count=raw['az_count'],
            project_name=raw['project_name'],
            nat_gateway_count=raw.get('nat_gateway_count', 0),
            create_public_subnets=raw.get('create_public_subnets', False),
            public_subnet_mask_bits=_parse_mask(raw.get('public_subnet_mask_bits')),
            subnet_layers=tuple(
                (name, _parse_mask(mask))
                for name, mask in (raw.get('subnet_layers') or {}).items()
            ),
            use_transit_gateway=raw.get('use_transit_gateway', False),
            transit_gateway_id=raw.get('transit_gateway_id'),
            additional_cidrs=tuple(
                str(_parse_cidr(cidr)) for cidr in raw.get('additional_cidrs') or ()
            ),
            public_subnet_with_tgw_enabled=raw.get('public_subnet_with_tgw_enabled', False),
            endpoints=EndpointToggles(
                s3=raw.get('s3_vpc_endpoint_enabled', False),
                dynamodb=raw.get('dynamodb_vpc_endpoint_enabled', False),
                session_manager=raw.get('session_manager_vpc_endpoints_enabled', False),
            ),
            encryption_key_arn=raw.get('encryption_key') or None,
            tags=MappingProxyType(dict(raw.get('tags') or {})),
        )


def load_environment_config(env_name: str, context: Optional[Dict[str, Any]]) -> VpcConfig:
    """
    Build the configuration for an environment from its context block.

    Args:
        env_name: Environment name (dev, stage, prod, ...)
        context: The environment's block, e.g. node.try_get_context(env_name)

    Raises:
        ConfigError: If the block is missing or invalid
    """
    if not env_name or not env_name.strip():
        raise ConfigError('Environment name is required')
    if context is None:
        raise ConfigError(f"No configuration found for environment '{env_name}'")
    if not isinstance(context, dict):
        raise ConfigError(
            f"Configuration for environment '{env_name}' must be an object"
        )
    return VpcConfig.from_context(context)


def validate_vpc_context(raw: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Validate a raw environment block.

    Returns:
        List of validation errors. Empty list if validation passes.
        Each error is a dict with 'field' and 'message' keys.

    Examples:
        >>> validate_vpc_context({'vpc_cidr_block': '10.0.0.0/16', 'az_count': 2,
        ...                       'project_name': 'core'})
        []

        >>> validate_vpc_context({'vpc_cidr_block': '10.0.0.0/16', 'az_count': 0,
        ...                       'project_name': 'core'})
        [{'field': 'az_count', 'message': 'Must be an integer >= 1'}]
    """
    if not isinstance(raw, dict):
        return [{'field': '<root>', 'message': 'Configuration must be an object'}]

    errors: List[Dict[str, str]] = []

    for key in sorted(set(raw) - ALLOWED_FIELDS, key=str):
        errors.append({'field': str(key), 'message': 'Unexpected field in configuration'})

    project_name = raw.get('project_name')
    if 'project_name' not in raw:
        errors.append({'field': 'project_name', 'message': 'Field is required'})
    elif not isinstance(project_name, str) or not project_name.strip():
        errors.append({'field': 'project_name', 'message': 'Must be a non-empty string'})

    if 'vpc_cidr_block' not in raw:
        errors.append({'field': 'vpc_cidr_block', 'message': 'Field is required'})
    else:
        vpc_network = _parse_cidr(raw['vpc_cidr_block'])
        if vpc_network is None:
            errors.append({'field': 'vpc_cidr_block', 'message': CIDR_MESSAGE})
        elif not MIN_MASK_BITS <= vpc_network.prefixlen <= MAX_MASK_BITS:
            errors.append({
                'field': 'vpc_cidr_block',
                'message': f'Prefix must be between /{MIN_MASK_BITS} and /{MAX_MASK_BITS}'
            })

    if 'az_count' not in raw:
        errors.append({'field': 'az_count', 'message': 'Field is required'})
    elif not _is_int(raw['az_count']) or raw['az_count'] < 1:
        errors.append({'field': 'az_count', 'message': 'Must be an integer >= 1'})

    if 'nat_gateway_count' in raw:
        nat = raw['nat_gateway_count']
        if not _is_int(nat) or nat < 0:
            errors.append({'field': 'nat_gateway_count', 'message': 'Must be an integer >= 0'})
        elif nat > 0 and raw.get('create_public_subnets') is not True:
            errors.append({
                'field': 'nat_gateway_count',
                'message': 'NAT gateways require create_public_subnets to be true'
            })
        elif nat > 0 and raw.get('use_transit_gateway') is True:
            # Both would install a 0.0.0.0/0 route on every private route table
            errors.append({
                'field': 'nat_gateway_count',
                'message': 'NAT gateways cannot be combined with use_transit_gateway'
            })

    for name in BOOLEAN_FIELDS:
        if name in raw and not isinstance(raw[name], bool):
            errors.append({'field': name, 'message': 'Must be a boolean'})

    if raw.get('create_public_subnets') is True:
        if raw.get('public_subnet_mask_bits') is None:
            errors.append({
                'field': 'public_subnet_mask_bits',
                'message': 'Field is required when create_public_subnets is true'
            })
        elif _parse_mask(raw['public_subnet_mask_bits']) is None:
            errors.append({'field': 'public_subnet_mask_bits', 'message': _mask_message()})

    layers = raw.get('subnet_layers')
    if layers is not None:
        if not isinstance(layers, dict):
            errors.append({'field': 'subnet_layers', 'message': 'Must be a mapping of layer name to mask bits'})
            layers = None
        else:
            for name, mask in layers.items():
                if not isinstance(name, str) or not name.strip():
                    errors.append({'field': 'subnet_layers', 'message': 'Layer names must be non-empty strings'})
                elif _parse_mask(mask) is None:
                    errors.append({'field': f'subnet_layers.{name}', 'message': _mask_message()})
                elif name == PUBLIC_LAYER_NAME and raw.get('create_public_subnets') is True:
                    errors.append({
                        'field': f'subnet_layers.{name}',
                        'message': 'Layer name is reserved for public subnets'
                    })

    if raw.get('use_transit_gateway') is True:
        tgw_id = raw.get('transit_gateway_id')
        if not isinstance(tgw_id, str) or not tgw_id.strip():
            errors.append({
                'field': 'transit_gateway_id',
                'message': 'Field is required when use_transit_gateway is true'
            })
        if not layers:
            errors.append({
                'field': 'subnet_layers',
                'message': 'At least one layer is required when use_transit_gateway is true'
            })

    cidrs = raw.get('additional_cidrs')
    if cidrs is not None:
        if not isinstance(cidrs, list):
            errors.append({'field': 'additional_cidrs', 'message': 'Must be a list of CIDR blocks'})
        else:
            for index, cidr in enumerate(cidrs):
                if _parse_cidr(cidr) is None:
                    errors.append({
                        'field': f'additional_cidrs[{index}]',
                        'message': CIDR_MESSAGE
                    })

    key = raw.get('encryption_key')
    if key is not None and not isinstance(key, str):
        errors.append({'field': 'encryption_key', 'message': 'Must be a KMS key ARN string'})

    tags = raw.get('tags')
    if tags is not None:
        if not isinstance(tags, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in tags.items()
        ):
            errors.append({'field': 'tags', 'message': 'Must be a mapping of strings to strings'})

    return errors


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_cidr(value: Any) -> Optional[ipaddress.IPv4Network]:
    # Explicit prefix, no host bits: '10.0.0.0' and '10.0.0.1/16' are rejected
    if not isinstance(value, str) or '/' not in value:
        return None
    try:
        network = ipaddress.ip_network(value.strip(), strict=True)
    except ValueError:
        return None
    if network.version != 4:
        return None
    return network


def _parse_mask(value: Any) -> Optional[int]:
    # cdk.json values may arrive as numeric strings ("24")
    if _is_int(value):
        mask = value
    elif isinstance(value, str) and value.strip().isdecimal():
        mask = int(value.strip())
    else:
        return None
    if MIN_MASK_BITS <= mask <= MAX_MASK_BITS:
        return mask
    return None


def _mask_message() -> str:
    return f'Must be an integer between {MIN_MASK_BITS} and {MAX_MASK_BITS}'
