"""Tests for the CloudFormation template collector."""

import pytest

from iac_threat_model.builder import build_threat_model
from iac_threat_model.collectors import collect_from_template
from iac_threat_model.errors import InvalidInputError
from iac_threat_model.models import DataStoreKind, EncryptionAtRest, EntryPointKind, WorkloadType

TEMPLATE = {
    "Resources": {
        "ApiA1B2": {
            "Type": "AWS::ApiGateway::RestApi",
            "Properties": {"Name": "orders"},
            "Metadata": {"aws:cdk:path": "Orders/Api/Resource"},
        },
        "HandlerC3D4": {
            "Type": "AWS::Lambda::Function",
            "Properties": {"Runtime": "python3.12", "Role": {"Fn::GetAtt": ["Role", "Arn"]}},
            "Metadata": {"aws:cdk:path": "Orders/Handler/Resource"},
        },
        "Table": {
            "Type": "AWS::DynamoDB::Table",
            "Properties": {"SSESpecification": {"SSEEnabled": True}},
        },
        "Bucket": {
            "Type": "AWS::S3::Bucket",
            "Properties": {
                "BucketEncryption": {
                    "ServerSideEncryptionConfiguration": [
                        {"ServerSideEncryptionByDefault": {"SSEAlgorithm": "aws:kms"}}
                    ]
                },
                "PublicAccessBlockConfiguration": {"BlockPublicAcls": True},
            },
        },
    }
}


class TestCollectFromTemplate:
    """Test collect_from_template."""

    def test_resources(self):
        """Resource ids prefer the construct path over the logical id."""
        collected = collect_from_template(TEMPLATE)
        assert [r.id for r in collected.resources] == [
            "Orders/Api/Resource",
            "Orders/Handler/Resource",
            "Table",
            "Bucket",
        ]
        assert [r.service for r in collected.resources] == ["apigateway", "lambda", "dynamodb", "s3"]

    def test_curated_props(self):
        """Only curated properties are kept."""
        collected = collect_from_template(TEMPLATE)
        handler = collected.resources[1]
        assert handler.props == {"runtime": "python3.12"}
        bucket = collected.resources[3]
        assert bucket.props == {"public_access": "blocked"}

    def test_entry_points(self):
        collected = collect_from_template(TEMPLATE)
        assert len(collected.entry_points) == 1
        assert collected.entry_points[0].id == "Orders/Api/Resource"
        assert collected.entry_points[0].kind == EntryPointKind.HTTP_API
        assert collected.entry_points[0].is_public

    def test_data_stores(self):
        collected = collect_from_template(TEMPLATE)
        stores = {ds.id: ds for ds in collected.data_stores}
        assert stores["Table"].kind == DataStoreKind.KEY_VALUE
        assert stores["Table"].encryption_at_rest == EncryptionAtRest.PROVIDER_MANAGED
        assert stores["Bucket"].encryption_at_rest == EncryptionAtRest.KMS

    def test_feeds_builder(self):
        """Collector output can be passed straight to the builder."""
        doc = build_threat_model(*collect_from_template(TEMPLATE))
        assert doc.workload_type == WorkloadType.SERVERLESS_API
        assert "API-6" in [t.id for t in doc.threats]

    def test_empty_template(self):
        collected = collect_from_template({})
        assert collected.resources == []

    @pytest.mark.parametrize("template", [[], "template", {"Resources": ["Bucket"]}])
    def test_invalid_template(self, template):
        with pytest.raises(InvalidInputError):
            collect_from_template(template)


class TestEntryPointDetection:
    """Test entry point detection per resource type."""

    @pytest.mark.parametrize(
        "resource,kind,is_public",
        [
            ({"Type": "AWS::ApiGatewayV2::Api"}, EntryPointKind.HTTP_API, True),
            (
                {
                    "Type": "AWS::ApiGateway::RestApi",
                    "Properties": {"EndpointConfiguration": {"Types": ["PRIVATE"]}},
                },
                EntryPointKind.HTTP_API,
                False,
            ),
            ({"Type": "AWS::ElasticLoadBalancingV2::LoadBalancer"}, EntryPointKind.LOAD_BALANCER, True),
            (
                {
                    "Type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
                    "Properties": {"Scheme": "internal"},
                },
                EntryPointKind.LOAD_BALANCER,
                False,
            ),
            ({"Type": "AWS::CloudFront::Distribution"}, EntryPointKind.CDN, True),
            (
                {"Type": "AWS::S3::Bucket", "Properties": {"WebsiteConfiguration": {"IndexDocument": "index.html"}}},
                EntryPointKind.PUBLIC_STORAGE_WEBSITE,
                True,
            ),
        ],
    )
    def test_detection(self, resource, kind, is_public):
        collected = collect_from_template({"Resources": {"Res": resource}})
        assert len(collected.entry_points) == 1
        assert collected.entry_points[0].kind == kind
        assert collected.entry_points[0].is_public == is_public

    def test_load_balancer_notes(self):
        collected = collect_from_template(
            {"Resources": {"Lb": {"Type": "AWS::ElasticLoadBalancingV2::LoadBalancer", "Properties": {"Scheme": "internal"}}}}
        )
        assert collected.entry_points[0].notes == "scheme: internal"

    def test_plain_bucket_is_not_entry_point(self):
        collected = collect_from_template({"Resources": {"Bucket": {"Type": "AWS::S3::Bucket"}}})
        assert collected.entry_points == []


class TestEncryptionDetection:
    """Test encryption-at-rest detection per resource type."""

    @pytest.mark.parametrize(
        "resource,expected",
        [
            ({"Type": "AWS::S3::Bucket"}, EncryptionAtRest.NONE),
            (
                {
                    "Type": "AWS::S3::Bucket",
                    "Properties": {
                        "BucketEncryption": {
                            "ServerSideEncryptionConfiguration": [
                                {"ServerSideEncryptionByDefault": {"SSEAlgorithm": "AES256"}}
                            ]
                        }
                    },
                },
                EncryptionAtRest.PROVIDER_MANAGED,
            ),
            ({"Type": "AWS::DynamoDB::Table"}, EncryptionAtRest.NONE),
            (
                {
                    "Type": "AWS::DynamoDB::Table",
                    "Properties": {"SSESpecification": {"SSEEnabled": True, "KMSMasterKeyId": "alias/app"}},
                },
                EncryptionAtRest.KMS,
            ),
            ({"Type": "AWS::RDS::DBInstance", "Properties": {"StorageEncrypted": "true"}}, EncryptionAtRest.PROVIDER_MANAGED),
            ({"Type": "AWS::RDS::DBCluster"}, EncryptionAtRest.NONE),
            ({"Type": "AWS::Redshift::Cluster"}, EncryptionAtRest.UNKNOWN),
            ({"Type": "AWS::Redshift::Cluster", "Properties": {"Encrypted": False}}, EncryptionAtRest.NONE),
            (
                {
                    "Type": "AWS::OpenSearchService::Domain",
                    "Properties": {"EncryptionAtRestOptions": {"Enabled": True, "KmsKeyId": "key"}},
                },
                EncryptionAtRest.KMS,
            ),
            ({"Type": "AWS::EFS::FileSystem", "Properties": {"Encrypted": True}}, EncryptionAtRest.PROVIDER_MANAGED),
        ],
    )
    def test_detection(self, resource, expected):
        collected = collect_from_template({"Resources": {"Store": resource}})
        assert collected.data_stores[0].encryption_at_rest == expected

    def test_non_store_types_ignored(self):
        collected = collect_from_template({"Resources": {"Fn": {"Type": "AWS::Lambda::Function"}}})
        assert collected.data_stores == []


class TestUnresolvedValues:
    """Test templates whose properties use intrinsic functions or unusual shapes."""

    @pytest.mark.parametrize(
        "resource,expected",
        [
            (
                {
                    "Type": "AWS::S3::Bucket",
                    "Properties": {
                        "BucketEncryption": {
                            "ServerSideEncryptionConfiguration": {
                                "Fn::If": ["UseKms", [{"ServerSideEncryptionByDefault": {"SSEAlgorithm": "aws:kms"}}], []]
                            }
                        }
                    },
                },
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::S3::Bucket", "Properties": {"BucketEncryption": {"Ref": "EncryptionParam"}}},
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {
                    "Type": "AWS::S3::Bucket",
                    "Properties": {
                        "BucketEncryption": {
                            "ServerSideEncryptionConfiguration": [{"Fn::GetAtt": ["Rule", "Default"]}]
                        }
                    },
                },
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::DynamoDB::Table", "Properties": {"SSESpecification": {"Fn::If": ["Prod", {}, {}]}}},
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::DynamoDB::Table", "Properties": {"SSESpecification": {"SSEEnabled": {"Ref": "Flag"}}}},
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::RDS::DBInstance", "Properties": {"StorageEncrypted": {"Ref": "Encrypt"}}},
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::OpenSearchService::Domain", "Properties": {"EncryptionAtRestOptions": {"Ref": "Opts"}}},
                EncryptionAtRest.UNKNOWN,
            ),
            (
                {"Type": "AWS::S3::Bucket", "Properties": {"Fn::If": ["Cond", {}, {}]}},
                EncryptionAtRest.NONE,
            ),
        ],
    )
    def test_encryption_is_unknown_not_an_error(self, resource, expected):
        """Values resolved only at deploy time do not break encryption detection."""
        collected = collect_from_template({"Resources": {"Store": resource}})
        assert collected.data_stores[0].encryption_at_rest == expected

    def test_endpoint_configuration_ref(self):
        """A REST API whose endpoint type is a Ref is treated as public."""
        collected = collect_from_template(
            {
                "Resources": {
                    "Api": {
                        "Type": "AWS::ApiGateway::RestApi",
                        "Properties": {"EndpointConfiguration": {"Ref": "EndpointType"}},
                    }
                }
            }
        )
        assert collected.entry_points[0].is_public

    def test_load_balancer_scheme_ref(self):
        """A load balancer scheme given as a Ref is treated as public without notes."""
        collected = collect_from_template(
            {
                "Resources": {
                    "Lb": {
                        "Type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
                        "Properties": {"Scheme": {"Ref": "Scheme"}},
                    }
                }
            }
        )
        assert collected.entry_points[0].is_public
        assert collected.entry_points[0].notes is None

    @pytest.mark.parametrize(
        "metadata",
        [["aws:cdk:path"], "Orders/Bucket", {"aws:cdk:path": {"Ref": "Path"}}, {"aws:cdk:path": ""}],
    )
    def test_unusual_metadata_falls_back_to_logical_id(self, metadata):
        collected = collect_from_template(
            {"Resources": {"Bucket": {"Type": "AWS::S3::Bucket", "Metadata": metadata}}}
        )
        assert collected.resources[0].id == "Bucket"

    def test_intrinsic_props_are_kept(self):
        """Curated props keep intrinsic values as-is."""
        collected = collect_from_template(
            {
                "Resources": {
                    "Fn": {
                        "Type": "AWS::Lambda::Function",
                        "Properties": {"Runtime": {"Ref": "Runtime"}},
                    }
                }
            }
        )
        assert collected.resources[0].props == {"runtime": {"Ref": "Runtime"}}
