from aeo_grader.gateway.perplexity import PerplexityGateway


def get_gateway() -> PerplexityGateway:
    """Answer-engine gateway for request handlers (overridden in tests).

    The credential is resolved per call, so a missing key surfaces as
    ConfigError from the first gateway call rather than here.
    """
    return PerplexityGateway()
