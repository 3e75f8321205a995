#!/usr/bin/env python3
"""
Print the VPC plan for an environment without synthesizing the stack.

Reads the environment's block from deployments/cdk.json, runs the planners
and prints the resulting plan as JSON. Structured logs go to stderr.

Usage:
    python show_plan.py prod
    python show_plan.py stage --context path/to/cdk.json --az eu-west-1a --az eu-west-1b

Exit codes:
    0: Plan computed
    1: Invalid or missing configuration (ConfigError)
    2: Topology precondition failed (TopologyError)
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from network_planning.errors import ConfigError, TopologyError
from network_planning.planner import plan_environment


DEFAULT_CONTEXT_FILE = Path(__file__).resolve().parent / 'deployments' / 'cdk.json'


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Show the VPC plan for an environment.')
    parser.add_argument('env_name', help='Environment name (dev, stage, prod, ...)')
    parser.add_argument(
        '--context',
        type=Path,
        default=DEFAULT_CONTEXT_FILE,
        help='cdk.json file holding the per-environment context',
    )
    parser.add_argument(
        '--az',
        action='append',
        dest='availability_zones',
        help='Availability zone names, in order, used for Name tags',
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        with open(args.context) as f:
            document = json.load(f)
    except (OSError, ValueError) as error:
        print(f'Unable to read {args.context}: {error}', file=sys.stderr)
        return 1

    context = document.get('context', {}) if isinstance(document, dict) else None
    if not isinstance(context, dict):
        print(f"Unable to read {args.context}: 'context' must be an object", file=sys.stderr)
        return 1

    # Errors are logged by plan_environment
    try:
        plan = plan_environment(
            args.env_name,
            context.get(args.env_name),
            availability_zones=args.availability_zones,
        )
    except ConfigError:
        return 1
    except TopologyError:
        return 2

    print(json.dumps(plan.to_dict(), indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
