from prometheus_client import Counter, Histogram, REGISTRY


# Re-importing api.main (uvicorn reload, tests) must not register a metric twice.
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # duplicate name: reuse the collector already in the default registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "todo_ai_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "todo_ai_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

EXTRACTIONS_TOTAL = get_or_create_metric(
    "todo_ai_extractions_total", "Todos extracted from natural language", Counter
)

SUMMARIES_TOTAL = get_or_create_metric(
    "todo_ai_summaries_total",
    "Summaries returned, by period and source (model or empty)",
    Counter,
    labelnames=["period", "source"],
)

MODEL_ERRORS_TOTAL = get_or_create_metric(
    "todo_ai_model_errors_total",
    "Model call failures by error code",
    Counter,
    labelnames=["code"],
)
