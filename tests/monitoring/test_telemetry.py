from telemetry_exporter.monitoring.telemetry import Telemetry, _sanitize_metric_name


def test_sanitize_metric_name_basic():
    """Sanitize: mantém nomes válidos e substitui caracteres inválidos."""
    assert _sanitize_metric_name("process_cpu_percent") == "process_cpu_percent"
    assert _sanitize_metric_name("1bad-start") == "_bad_start"
    assert _sanitize_metric_name("weird.chars/and:spaces") == "weird_chars_and:spaces"
    assert _sanitize_metric_name("ção") == "__o"
    assert _sanitize_metric_name("") == "_"


def test_empty_telemetry_renders_empty_text():
    assert Telemetry().to_prometheus() == ""


def test_set_gauge_creates_and_updates():
    t = Telemetry()
    t.set_gauge("process_num_threads", 4, "threads")
    t.set_gauge("process_num_threads", 7)
    text = t.to_prometheus()
    assert "# HELP process_num_threads threads" in text
    assert "# TYPE process_num_threads gauge" in text
    assert "process_num_threads 7.0" in text
    assert t.metric_names() == ["process_num_threads"]


def test_inc_counter_accumulates_and_strips_total():
    t = Telemetry()
    t.inc_counter("scrapes_total")
    t.inc_counter("scrapes", 2)
    text = t.to_prometheus()
    assert "# TYPE scrapes_total counter" in text
    assert "scrapes_total 3.0" in text
    assert t.metric_names() == ["scrapes"]


def test_separate_instances_do_not_share_registry():
    """Cada Telemetry tem seu próprio registry: mesmos nomes não colidem."""
    a, b = Telemetry(), Telemetry()
    a.set_gauge("up", 1)
    b.set_gauge("up", 0)
    assert "up 1.0" in a.to_prometheus()
    assert "up 0.0" in b.to_prometheus()


def test_invalid_names_are_sanitized_on_render():
    t = Telemetry()
    t.set_gauge("cache-hit.ratio", 0.5)
    assert "cache_hit_ratio 0.5" in t.to_prometheus()
