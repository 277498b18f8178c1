"""Tests for workload, trust boundary and data flow inference."""

import logging

import pytest

from iac_threat_model.facts import build_facts
from iac_threat_model.inference import infer_data_flows, infer_trust_boundaries, infer_workload_type
from iac_threat_model.inference import flows as flows_module
from iac_threat_model.models import BoundaryType, WorkloadType


def facts_for(*resources, entry_points=(), data_stores=()):
    """Build facts from (id, type) pairs."""
    return build_facts(
        [{"id": resource_id, "type": resource_type} for resource_id, resource_type in resources],
        list(entry_points),
        list(data_stores),
    )


class TestWorkloadInference:
    """Test infer_workload_type."""

    @pytest.mark.parametrize(
        "resource_type,expected",
        [
            ("AWS::Bedrock::KnowledgeBase", WorkloadType.GENAI_RAG),
            ("AWS::SageMaker::Model", WorkloadType.GENAI_RAG),
            ("AWS::SageMaker::EndpointConfig", WorkloadType.GENAI_RAG),
            ("AWS::Glue::Job", WorkloadType.DATA_PIPELINE),
            ("AWS::StepFunctions::StateMachine", WorkloadType.DATA_PIPELINE),
            ("AWS::KinesisFirehose::DeliveryStream", WorkloadType.DATA_PIPELINE),
            ("AWS::Lambda::Function", WorkloadType.SERVERLESS_API),
            ("AWS::ApiGatewayV2::Api", WorkloadType.SERVERLESS_API),
            ("AWS::ECS::Service", WorkloadType.CONTAINER_APP),
            ("AWS::EKS::Cluster", WorkloadType.CONTAINER_APP),
            ("AWS::S3::Bucket", WorkloadType.GENERAL),
        ],
    )
    def test_single_type(self, resource_type, expected):
        """A single characteristic type selects its workload."""
        assert infer_workload_type(facts_for(("App/R", resource_type))) == expected

    def test_genai_wins_over_pipeline(self):
        """GenAI resources take precedence over pipeline resources."""
        facts = facts_for(
            ("App/Kb", "AWS::Bedrock::KnowledgeBase"),
            ("App/Etl", "AWS::Glue::Job"),
        )
        assert infer_workload_type(facts) == WorkloadType.GENAI_RAG

    def test_pipeline_wins_over_serverless(self):
        """Pipeline resources take precedence over serverless resources."""
        facts = facts_for(
            ("App/Fn", "AWS::Lambda::Function"),
            ("App/Flow", "AWS::StepFunctions::StateMachine"),
        )
        assert infer_workload_type(facts) == WorkloadType.DATA_PIPELINE

    def test_load_balancer_with_instances_is_container_app(self):
        """A load balancer classifies as container-app before three-tier is checked."""
        facts = facts_for(
            ("App/Lb", "AWS::ElasticLoadBalancingV2::LoadBalancer"),
            ("App/Asg", "AWS::AutoScaling::AutoScalingGroup"),
            ("App/Db", "AWS::RDS::DBInstance"),
        )
        assert infer_workload_type(facts) == WorkloadType.CONTAINER_APP

    def test_empty_inventory_is_general(self):
        """No resources classifies as general."""
        assert infer_workload_type(facts_for()) == WorkloadType.GENERAL


class TestTrustBoundaries:
    """Test infer_trust_boundaries."""

    def test_account_boundary_always_present(self):
        """The account boundary is emitted even for an empty inventory."""
        boundaries = infer_trust_boundaries(facts_for())
        assert [b.id for b in boundaries] == ["account-boundary"]
        assert boundaries[0].type == BoundaryType.ACCOUNT_BOUNDARY

    def test_internet_boundary_for_public_entry_point(self):
        """A public entry point adds the internet boundary."""
        facts = facts_for(
            ("App/Api", "AWS::ApiGateway::RestApi"),
            entry_points=[{"id": "App/Api", "kind": "http-api", "is_public": True}],
        )
        ids = [b.id for b in infer_trust_boundaries(facts)]
        assert "internet-cloud-boundary" in ids

    def test_no_internet_boundary_when_all_private(self):
        """Private entry points do not add an internet boundary."""
        facts = facts_for(
            ("App/Lb", "AWS::ElasticLoadBalancingV2::LoadBalancer"),
            entry_points=[{"id": "App/Lb", "kind": "load-balancer", "is_public": False}],
        )
        types = {b.type for b in infer_trust_boundaries(facts)}
        assert BoundaryType.INTERNET_TO_CLOUD not in types

    def test_vpc_adds_network_boundary(self):
        """A VPC adds the network boundary."""
        facts = facts_for(("App/Vpc", "AWS::EC2::VPC"))
        assert [b.id for b in infer_trust_boundaries(facts)] == ["account-boundary", "vpc-boundary"]

    def test_service_pair_emitted_once(self):
        """Service pairs produce one boundary regardless of instance count."""
        facts = facts_for(
            ("App/FnA", "AWS::Lambda::Function"),
            ("App/FnB", "AWS::Lambda::Function"),
            ("App/TableA", "AWS::DynamoDB::Table"),
            ("App/TableB", "AWS::DynamoDB::Table"),
        )
        ids = [b.id for b in infer_trust_boundaries(facts)]
        assert ids == ["account-boundary", "lambda-dynamodb-boundary"]

    def test_boundary_order(self):
        """Boundaries appear in a fixed order."""
        facts = facts_for(
            ("App/Bucket", "AWS::S3::Bucket"),
            ("App/Fn", "AWS::Lambda::Function"),
            ("App/Api", "AWS::ApiGateway::RestApi"),
            ("App/Table", "AWS::DynamoDB::Table"),
            ("App/Vpc", "AWS::EC2::VPC"),
            entry_points=[{"id": "App/Api", "kind": "http-api", "is_public": True}],
        )
        assert [b.id for b in infer_trust_boundaries(facts)] == [
            "account-boundary",
            "internet-cloud-boundary",
            "vpc-boundary",
            "lambda-dynamodb-boundary",
            "apigw-lambda-boundary",
            "lambda-s3-boundary",
        ]


class TestDataFlows:
    """Test infer_data_flows."""

    def test_empty_inventory(self):
        """No resources means no flows."""
        assert infer_data_flows(facts_for()) == []

    def test_cross_product(self):
        """Every source instance connects to every target instance."""
        facts = facts_for(
            ("App/Api", "AWS::ApiGateway::RestApi"),
            ("App/FnA", "AWS::Lambda::Function"),
            ("App/FnB", "AWS::Lambda::Function"),
        )
        flows = infer_data_flows(facts)
        assert [(f.source, f.target, f.label) for f in flows] == [
            ("App/Api", "App/FnA", "HTTP requests"),
            ("App/Api", "App/FnB", "HTTP requests"),
        ]

    def test_rule_order(self):
        """Flows are grouped by rule in rule order."""
        facts = facts_for(
            ("App/Bucket", "AWS::S3::Bucket"),
            ("App/Table", "AWS::DynamoDB::Table"),
            ("App/Fn", "AWS::Lambda::Function"),
            ("App/Api", "AWS::ApiGateway::RestApi"),
        )
        labels = [f.label for f in infer_data_flows(facts)]
        assert labels == ["HTTP requests", "Database operations", "Object operations"]

    def test_glue_pipeline_flows(self):
        """Glue reads from and writes to S3 and loads Redshift."""
        facts = facts_for(
            ("App/Bucket", "AWS::S3::Bucket"),
            ("App/Job", "AWS::Glue::Job"),
            ("App/Warehouse", "AWS::Redshift::Cluster"),
        )
        assert [(f.source, f.target, f.label) for f in infer_data_flows(facts)] == [
            ("App/Bucket", "App/Job", "Data ingestion"),
            ("App/Job", "App/Bucket", "Processed data output"),
            ("App/Job", "App/Warehouse", "Data warehouse loading"),
        ]

    def test_vector_search_pairs_are_interleaved(self):
        """Each vector search edge is immediately followed by its return edge."""
        facts = facts_for(
            ("App/Model", "AWS::SageMaker::Model"),
            ("App/SearchA", "AWS::OpenSearchService::Domain"),
            ("App/SearchB", "AWS::OpenSearchService::Domain"),
        )
        assert [(f.source, f.target, f.label) for f in infer_data_flows(facts)] == [
            ("App/Model", "App/SearchA", "Vector similarity search"),
            ("App/SearchA", "App/Model", "Retrieved context"),
            ("App/Model", "App/SearchB", "Vector similarity search"),
            ("App/SearchB", "App/Model", "Retrieved context"),
        ]

    def test_missing_target_service(self):
        """A rule with no target instances contributes nothing."""
        facts = facts_for(("App/Api", "AWS::ApiGateway::RestApi"))
        assert infer_data_flows(facts) == []

    def test_large_fanout_is_logged(self, monkeypatch, caplog):
        """Rules exceeding the fan-out threshold log a warning but keep every edge."""
        monkeypatch.setattr(flows_module, "LARGE_FANOUT_THRESHOLD", 3)
        facts = facts_for(
            ("App/ApiA", "AWS::ApiGateway::RestApi"),
            ("App/ApiB", "AWS::ApiGateway::RestApi"),
            ("App/FnA", "AWS::Lambda::Function"),
            ("App/FnB", "AWS::Lambda::Function"),
        )
        with caplog.at_level(logging.WARNING):
            flows = infer_data_flows(facts)
        assert len(flows) == 4
        assert "produced 4 edges" in caplog.text
