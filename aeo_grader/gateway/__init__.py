"""Answer-engine gateway layer.

  - PerplexityGateway: one chat-completion call per request, typed errors
  - Output normalizer: code-fence stripping and JSON decoding of model output
"""

from aeo_grader.gateway.normalizer import normalize_output, parse_model_json
from aeo_grader.gateway.perplexity import PerplexityGateway
from aeo_grader.gateway.types import ChatMessage, GatewayRequest, GatewayResponse

__all__ = [
    "ChatMessage",
    "GatewayRequest",
    "GatewayResponse",
    "PerplexityGateway",
    "normalize_output",
    "parse_model_json",
]
