"""Inference of workload type, trust boundaries and data flows."""

from .boundaries import infer_trust_boundaries
from .flows import infer_data_flows
from .workload import infer_workload_type

__all__ = ["infer_workload_type", "infer_trust_boundaries", "infer_data_flows"]
