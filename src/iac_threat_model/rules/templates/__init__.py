"""Per-workload threat templates."""

from .data_pipeline import DataPipelineContext, data_pipeline_threats
from .genai_rag import GenAiRagContext, genai_rag_threats
from .general import GeneralContext, general_cloud_threats
from .serverless_api import ServerlessApiContext, serverless_api_threats

__all__ = [
    "DataPipelineContext",
    "GenAiRagContext",
    "GeneralContext",
    "ServerlessApiContext",
    "data_pipeline_threats",
    "genai_rag_threats",
    "general_cloud_threats",
    "serverless_api_threats",
]
