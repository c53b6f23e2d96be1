from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from fastapi import Response


generation_submissions = Counter(
    "generation_submissions_total",
    "Submit attempts on the studio, by outcome",
    ["outcome"],
)

generation_results = Counter(
    "generation_results_total",
    "Settled generation sessions",
    ["status", "kind"],
)

generation_latency = Histogram(
    "generation_latency_seconds",
    "Time from accepted submission to settlement",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

backend_generations = Counter(
    "backend_generations_total",
    "Generations served by the generation backend",
    ["content_type", "outcome"],
)


def metrics_response() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
