from concurrent.futures import ThreadPoolExecutor
from opentelemetry import trace

from backend.configuration.monitor import bind_context, start_span

def current_span_id():
    return trace.get_current_span().get_span_context().span_id

def test_bound_call_runs_under_caller_span():
    with start_span("weekly_schedule") as span:
        parent_id = span.get_span_context().span_id
        with ThreadPoolExecutor(max_workers=2) as executor:
            bound = executor.submit(bind_context(current_span_id)).result()

    assert bound == parent_id
    assert bound != trace.INVALID_SPAN_ID

def test_bound_call_restores_worker_context():
    with ThreadPoolExecutor(max_workers=1) as executor:
        executor.submit(current_span_id).result()
        with start_span("weekly_schedule"):
            executor.submit(bind_context(current_span_id)).result()
        assert executor.submit(current_span_id).result() == trace.INVALID_SPAN_ID
