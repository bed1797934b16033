import pytest

from case_companion.telemetry import InMemoryReporter, TelemetryContext

pytestmark = pytest.mark.unit


def test_disabled_context_is_a_shared_no_op():
    first = TelemetryContext(InMemoryReporter(), enabled=False)
    second = TelemetryContext()
    assert first is second
    with first("anything") as ctx:
        ctx.metric("m", 1)


def test_enabled_context_without_reporters_is_no_op():
    assert TelemetryContext(enabled=True) is TelemetryContext(enabled=False)


def test_nested_scopes_are_dotted():
    reporter = InMemoryReporter()
    tele = TelemetryContext(reporter, enabled=True)
    with tele("flow"), tele("request"):
        tele.count("sent")
    assert set(reporter.timings) == {"flow", "flow.request"}
    assert "flow.request.sent" in reporter.metrics


def test_broken_reporter_does_not_raise(caplog):
    class Broken:
        def record_timing(self, *_args, **_kwargs):
            raise RuntimeError("boom")

        def record_metric(self, *_args, **_kwargs):
            raise RuntimeError("boom")

    tele = TelemetryContext(Broken(), enabled=True)
    with tele("scope"):
        tele.metric("value", 3)
    assert "Broken" in caplog.text


def test_report_lists_scopes():
    reporter = InMemoryReporter()
    reporter.record_timing("completion.request", 0.25)
    reporter.record_metric("completion.success", 1)
    report = reporter.get_report()
    assert "completion.request" in report
    assert "completion.success" in report
