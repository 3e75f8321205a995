"""
Unit tests for resource naming and tagging.
"""

import pytest

from network_planning.errors import NamingWarning
from network_planning.naming import (
    az_identifier,
    build_tag_plan,
    private_subnet_name_tag,
    public_subnet_name_tag,
    resolve_layer,
    vpc_name_tag,
)
from network_planning.types import SubnetInstance

from factories import make_config


class TestResolveLayer:
    """Test recovering a subnet's layer from its name."""

    def test_exact_name(self):
        assert resolve_layer('app', ['app', 'data']) == 'app'

    def test_generated_suffix(self):
        """Test provider-generated ids still resolve."""
        assert resolve_layer('dataSubnet2', ['app', 'data']) == 'data'

    def test_no_match_returns_none(self):
        assert resolve_layer('isolatedSubnet1', ['app', 'data']) is None

    def test_first_declared_match_wins(self):
        """Test overlapping layer names resolve to the first declared one."""
        assert resolve_layer('appdataSubnet1', ['data', 'app']) == 'data'
        assert resolve_layer('appdataSubnet1', ['app', 'data']) == 'app'

    def test_no_layers(self):
        assert resolve_layer('appSubnet1', []) is None

    @pytest.mark.parametrize('name', [None, 42, ''])
    def test_never_raises_on_odd_names(self, name):
        assert resolve_layer(name, ['app']) is None

    def test_empty_layer_name_never_matches(self):
        assert resolve_layer('appSubnet1', ['', 'app']) == 'app'


class TestNameTags:
    """Test the Name tag conventions."""

    def test_az_identifier(self):
        assert az_identifier('us-east-1a') == '1a'
        assert az_identifier('ap-southeast-2c') == '2c'

    def test_az_identifier_without_dashes(self):
        assert az_identifier('dummy1a') == 'dummy1a'

    def test_vpc_name(self):
        assert vpc_name_tag('core', 'prod') == 'vpc-core-prod'

    def test_public_subnet_name(self):
        assert public_subnet_name_tag('core', 'prod', '1a') == 'public-core-prod-1a'

    def test_private_subnet_name(self):
        assert private_subnet_name_tag('core', 'prod', 'data', '1b') == 'private-core-prod-data-1b'


class TestBuildTagPlan:
    """Test tag plan derivation."""

    def test_tags_for_every_resource(self):
        config = make_config(tags={'Project': 'core', 'Owner': 'platform'})
        plan = build_tag_plan(
            config,
            'dev',
            public_instances=[SubnetInstance('publicSubnet1', '1a')],
            private_instances=[
                SubnetInstance('appSubnet1', '1a'),
                SubnetInstance('dataSubnet2', '1b'),
            ],
        )

        assert plan.name_of('vpc') == 'vpc-core-dev'
        assert plan.name_of('publicSubnet1') == 'public-core-dev-1a'
        assert plan.name_of('appSubnet1') == 'private-core-dev-app-1a'
        assert plan.name_of('dataSubnet2') == 'private-core-dev-data-1b'
        assert plan.resource_tags['appSubnet1']['Owner'] == 'platform'
        assert plan.global_tags == {'Project': 'core', 'Owner': 'platform'}
        assert plan.warnings == ()

    def test_name_tag_overrides_global_name(self):
        config = make_config(tags={'Name': 'shared'})
        plan = build_tag_plan(config, 'dev', [], [SubnetInstance('appSubnet1', '1a')])
        assert plan.name_of('appSubnet1') == 'private-core-dev-app-1a'
        assert plan.global_tags == {'Name': 'shared'}

    def test_unresolved_subnet_is_a_warning(self):
        """Test an unmatched private subnet is skipped, not fatal."""
        config = make_config()
        plan = build_tag_plan(
            config,
            'dev',
            public_instances=[],
            private_instances=[
                SubnetInstance('mysterySubnet1', '1a'),
                SubnetInstance('appSubnet1', '1a'),
            ],
        )

        assert plan.warnings == (
            NamingWarning(
                subnet_name='mysterySubnet1',
                message='Unable to determine layer name for private subnet with ID: mysterySubnet1',
            ),
        )
        assert plan.name_of('mysterySubnet1') is None
        assert plan.resource_tags['mysterySubnet1'] == {'Project': 'core'}
        assert plan.name_of('appSubnet1') == 'private-core-dev-app-1a'

    def test_unknown_resource_has_no_name(self):
        plan = build_tag_plan(make_config(), 'dev', [], [])
        assert plan.name_of('appSubnet9') is None

    def test_tag_plan_is_deterministic(self):
        config = make_config()
        instances = [SubnetInstance('appSubnet1', '1a'), SubnetInstance('dataSubnet1', '1a')]
        assert build_tag_plan(config, 'dev', [], instances) == build_tag_plan(config, 'dev', [], instances)

    def test_tag_plan_is_read_only(self):
        plan = build_tag_plan(make_config(), 'dev', [], [SubnetInstance('appSubnet1', '1a')])
        with pytest.raises(TypeError):
            plan.resource_tags['appSubnet1']['Name'] = 'renamed'
        with pytest.raises(TypeError):
            plan.global_tags['Owner'] = 'platform'
        assert plan.name_of('appSubnet1') == 'private-core-dev-app-1a'
