"""
Synthesis tests for the VPC stack.

Builds the stack from an in-memory context block and checks the resulting
CloudFormation template. Requires Node.js, which the CDK libraries run on.
"""

import json
import shutil

import pytest

if shutil.which('node') is None:
    pytest.skip('AWS CDK synthesis requires Node.js', allow_module_level=True)

from aws_cdk import App, Environment
from aws_cdk.assertions import Match, Template

from network_planning.errors import ConfigError, TopologyError
from vpc.vpc_stack import VpcStack

from factories import TGW_ID, make_context


def _synth(context_block, env_name='dev', **stack_kwargs):
    app = App(context={env_name: context_block})
    stack = VpcStack(app, 'TestStack', env_name=env_name, **stack_kwargs)
    return stack, Template.from_stack(stack)


def _tgw_context(**overrides):
    settings = {'use_transit_gateway': True, 'transit_gateway_id': TGW_ID}
    settings.update(overrides)
    return make_context(**settings)


class TestVpc:
    """Test VPC and subnet synthesis."""

    def test_subnets_per_layer_and_az(self):
        _, template = _synth(make_context())
        template.resource_count_is('AWS::EC2::VPC', 1)
        template.resource_count_is('AWS::EC2::Subnet', 4)
        template.has_resource_properties('AWS::EC2::VPC', {
            'CidrBlock': '10.0.0.0/16',
            'EnableDnsHostnames': True,
            'EnableDnsSupport': True,
        })

    def test_public_subnets_do_not_map_public_ips(self):
        _, template = _synth(make_context(
            create_public_subnets=True,
            public_subnet_mask_bits=24,
            nat_gateway_count=1,
        ))
        template.resource_count_is('AWS::EC2::Subnet', 6)
        template.resource_count_is('AWS::EC2::NatGateway', 1)
        template.has_resource_properties('AWS::EC2::Subnet', {
            'MapPublicIpOnLaunch': False,
            'CidrBlock': Match.string_like_regexp(r'/24$'),
        })

    def test_vpc_tags(self):
        _, template = _synth(make_context())
        template.has_resource_properties('AWS::EC2::VPC', {
            'Tags': Match.array_with([
                {'Key': 'Name', 'Value': 'vpc-core-dev'},
                {'Key': 'Project', 'Value': 'core'},
            ]),
        })

    def test_subnet_name_tags_with_known_zones(self):
        """Test Name tags use the AZ id when the zones are known."""
        _, template = _synth(
            make_context(az_count=3),
            env=Environment(account='111122223333', region='eu-west-1'),
        )
        template.resource_count_is('AWS::EC2::Subnet', 6)
        template.has_resource_properties('AWS::EC2::Subnet', {
            'Tags': Match.array_with([
                {'Key': 'Name', 'Value': 'private-core-dev-data-dummy1c'},
            ]),
        })

    def test_outputs(self):
        _, template = _synth(make_context())
        template.has_output('VPCId', {'Export': {'Name': 'TestStack-VPCId'}})
        template.has_output('VPCCidr', {'Export': {'Name': 'TestStack-VPCCidr'}})

    def test_too_many_azs_for_env_agnostic_stack(self):
        """Test a plan the region cannot realize fails instead of shrinking."""
        with pytest.raises(TopologyError, match='fewer than 3 availability zones'):
            _synth(make_context(az_count=3))

    def test_missing_environment(self):
        app = App(context={'dev': make_context()})
        with pytest.raises(ConfigError):
            VpcStack(app, 'TestStack', env_name='prod')

    def test_vpc_prefix_too_large(self):
        with pytest.raises(ConfigError):
            _synth(make_context(vpc_cidr_block='10.0.0.0/8'))

    def test_known_zones_reuse_planned_tags(self):
        stack, _ = _synth(
            make_context(),
            env=Environment(account='111122223333', region='eu-west-1'),
        )
        assert stack.tag_plan is stack.plan.tags

    def test_plan_is_logged_once(self, capsys):
        """Test a synth run logs one start and one completion and nothing twice."""
        _synth(make_context())

        # stderr may also carry Node.js warnings from the CDK runtime
        events = [
            json.loads(line)
            for line in capsys.readouterr().err.splitlines()
            if line.startswith('{') and '"runId"' in line
        ]
        assert [e['event'] for e in events] == ['plan_start', 'plan_complete']


class TestTransitGateway:
    """Test transit gateway attachment and routes."""

    def test_nat_gateways_rejected_with_transit_gateway(self):
        """Test NAT and transit gateway default routes never share a route table."""
        with pytest.raises(ConfigError) as exc_info:
            _synth(_tgw_context(
                create_public_subnets=True,
                public_subnet_mask_bits=24,
                nat_gateway_count=1,
            ))
        fields = [e['field'] for e in exc_info.value.details['errors']]
        assert fields == ['nat_gateway_count']

    def test_no_attachment_by_default(self):
        _, template = _synth(make_context())
        template.resource_count_is('AWS::EC2::TransitGatewayVpcAttachment', 0)
        template.resource_count_is('AWS::EC2::Route', 0)

    def test_attachment_on_last_layer(self):
        _, template = _synth(_tgw_context())

        attachments = template.find_resources('AWS::EC2::TransitGatewayVpcAttachment')
        assert len(attachments) == 1
        properties = next(iter(attachments.values()))['Properties']
        assert properties['TransitGatewayId'] == TGW_ID
        subnet_refs = [ref['Ref'] for ref in properties['SubnetIds']]
        assert len(subnet_refs) == 2
        assert all('dataSubnet' in ref for ref in subnet_refs)

    def test_default_and_additional_routes(self):
        _, template = _synth(_tgw_context(additional_cidrs=['10.1.0.0/16']))

        routes = template.find_resources('AWS::EC2::Route')
        destinations = sorted(r['Properties']['DestinationCidrBlock'] for r in routes.values())
        assert destinations == ['0.0.0.0/0'] * 4 + ['10.1.0.0/16'] * 4
        assert all(r['Properties']['TransitGatewayId'] == TGW_ID for r in routes.values())

    def test_routes_depend_on_attachment(self):
        _, template = _synth(_tgw_context(additional_cidrs=['10.1.0.0/16']))

        attachment_id = next(iter(template.find_resources('AWS::EC2::TransitGatewayVpcAttachment')))
        for route in template.find_resources('AWS::EC2::Route').values():
            assert attachment_id in route['DependsOn']


class TestEndpoints:
    """Test VPC endpoint synthesis."""

    def test_no_endpoints_by_default(self):
        _, template = _synth(make_context())
        template.resource_count_is('AWS::EC2::VPCEndpoint', 0)

    def test_gateway_and_interface_endpoints(self):
        _, template = _synth(make_context(
            s3_vpc_endpoint_enabled=True,
            dynamodb_vpc_endpoint_enabled=True,
            session_manager_vpc_endpoints_enabled=True,
        ))
        template.resource_count_is('AWS::EC2::VPCEndpoint', 5)
        template.has_resource_properties('AWS::EC2::VPCEndpoint', {
            'VpcEndpointType': 'Interface',
            'PrivateDnsEnabled': True,
        })
        template.has_resource_properties('AWS::EC2::SecurityGroup', {
            'GroupName': 'vpc-endpoints-core-dev-sg',
        })


class TestFlowLogs:
    """Test flow log synthesis."""

    def test_flow_logs_with_new_key(self):
        _, template = _synth(make_context())
        template.resource_count_is('AWS::EC2::FlowLog', 1)
        template.resource_count_is('AWS::KMS::Key', 1)
        template.has_resource_properties('AWS::KMS::Key', {'EnableKeyRotation': True})
        template.has_resource_properties('AWS::KMS::Alias', {
            'AliasName': 'alias/vpc-flowlogs-core-dev',
        })
        template.has_resource_properties('AWS::Logs::LogGroup', {
            'LogGroupName': '/vpc/flowlogs/core-dev',
            'RetentionInDays': 365,
        })
        template.has_resource_properties('AWS::EC2::FlowLog', {'TrafficType': 'ALL'})

    def test_existing_key_is_reused(self):
        arn = 'arn:aws:kms:eu-west-1:111122223333:key/1234abcd-12ab-34cd-56ef-1234567890ab'
        _, template = _synth(make_context(encryption_key=arn))
        template.resource_count_is('AWS::KMS::Key', 0)
        template.has_resource_properties('AWS::Logs::LogGroup', {'KmsKeyId': arn})
