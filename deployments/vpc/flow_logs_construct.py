"""
Flow log construct for the multi-AZ VPC stack.

Captures all VPC traffic into a KMS-encrypted CloudWatch Logs log group.

Architecture:
- IAM role assumed by the VPC Flow Logs service to write to the log group
- Existing KMS key reused when an ARN is configured, otherwise a new
  rotating key is created for CloudWatch Logs
- Log group named /vpc/flowlogs/<project>-<env>, retained for one year
"""

from aws_cdk import (
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_kms as kms,
    aws_logs as logs,
    RemovalPolicy,
    Stack,
)
from constructs import Construct

from network_planning.types import FlowLogPlan


RETENTION = {
    365: logs.RetentionDays.ONE_YEAR,
}

TRAFFIC_TYPES = {
    'ALL': ec2.FlowLogTrafficType.ALL,
    'ACCEPT': ec2.FlowLogTrafficType.ACCEPT,
    'REJECT': ec2.FlowLogTrafficType.REJECT,
}


class FlowLogsConstruct(Construct):
    """
    Construct that enables VPC flow logs.

    Attributes:
        role: IAM role used to deliver flow logs
        key: KMS key encrypting the log group (imported or created)
        log_group: CloudWatch Logs destination
        flow_log: The VPC flow log
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.Vpc,
        flow_logs: FlowLogPlan,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.role = iam.Role(
            self,
            'FlowLogsRole',
            assumed_by=iam.ServicePrincipal('vpc-flow-logs.amazonaws.com'),
        )

        if flow_logs.create_key:
            self.key = self._create_key(flow_logs)
        else:
            self.key = kms.Key.from_key_arn(
                self,
                'FlowLogsEncryptionKey',
                flow_logs.encryption_key_arn,
            )

        self.log_group = logs.LogGroup(
            self,
            'FlowLogsLogGroup',
            log_group_name=flow_logs.log_group_name,
            retention=RETENTION[flow_logs.retention_days],
            removal_policy=RemovalPolicy.DESTROY,
            encryption_key=self.key,
        )

        self.flow_log = ec2.FlowLog(
            self,
            'FlowLogs',
            resource_type=ec2.FlowLogResourceType.from_vpc(vpc),
            destination=ec2.FlowLogDestination.to_cloud_watch_logs(self.log_group, self.role),
            traffic_type=TRAFFIC_TYPES[flow_logs.traffic_type],
        )
        self.flow_log.node.add_dependency(vpc)

    def _create_key(self, flow_logs: FlowLogPlan) -> kms.Key:
        stack = Stack.of(self)
        return kms.Key(
            self,
            'FlowLogsEncryptionKey',
            enable_key_rotation=True,
            description='Used for cloudwatch logs encryption key',
            alias=flow_logs.key_alias,
            removal_policy=RemovalPolicy.DESTROY,
            policy=iam.PolicyDocument(
                statements=[
                    # CloudWatch Logs encrypts and decrypts the log group
                    iam.PolicyStatement(
                        effect=iam.Effect.ALLOW,
                        actions=[
                            'kms:Encrypt*',
                            'kms:Decrypt*',
                            'kms:ReEncrypt*',
                            'kms:GenerateDataKey*',
                            'kms:Describe*',
                        ],
                        resources=['*'],
                        principals=[
                            iam.ServicePrincipal(f'logs.{stack.region}.amazonaws.com')
                        ],
                    ),
                    # Account administrators keep full control of the key
                    iam.PolicyStatement(
                        effect=iam.Effect.ALLOW,
                        actions=['kms:*'],
                        resources=['*'],
                        principals=[iam.AccountPrincipal(stack.account)],
                    ),
                ]
            ),
        )
