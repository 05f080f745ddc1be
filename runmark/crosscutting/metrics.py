"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus): observabilidad de bajo acoplamiento

Responsabilidades:
    - Definir métricas Prometheus en un registry propio.
    - Proveer funciones pequeñas y estables para registrar eventos/duraciones.
    - Cuidar cardinalidad (NO root_id, NO texto, solo nombres de pasada/cap).
    - Exponer el payload de exposición para el host.

Colaboradores:
    - container.AnnotationEngine: pasadas ejecutadas/omitidas y duración.
    - application/text_view: caps alcanzados.
    - application/reconcile: operaciones de reconciliación.

Decisiones de diseño:
    - Registro único global: Prometheus requiere singletons.
    - Labels acotados a valores conocidos.
===============================================================================
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

_passes_run_total: Optional[Counter] = None
_passes_skipped_total: Optional[Counter] = None
_spans_emitted_total: Optional[Counter] = None
_cap_hits_total: Optional[Counter] = None
_reconcile_ops_total: Optional[Counter] = None
_enhancement_failures_total: Optional[Counter] = None
_pass_duration: Optional[Histogram] = None


def _init_metrics() -> None:
    """Inicializa métricas (una sola vez)."""
    global _passes_run_total, _passes_skipped_total, _spans_emitted_total
    global _cap_hits_total, _reconcile_ops_total, _enhancement_failures_total
    global _pass_duration

    if _passes_run_total is not None:
        return

    _passes_run_total = Counter(
        "runmark_passes_run_total",
        "Pasadas de anotación ejecutadas",
        ["pass_name"],
        registry=_registry,
    )

    _passes_skipped_total = Counter(
        "runmark_passes_skipped_total",
        "Pasadas omitidas por firma sin cambios",
        ["pass_name"],
        registry=_registry,
    )

    _spans_emitted_total = Counter(
        "runmark_spans_emitted_total",
        "Spans materializados por pasada",
        ["pass_name"],
        registry=_registry,
    )

    _cap_hits_total = Counter(
        "runmark_cap_hits_total",
        "Veces que se alcanzó un límite duro",
        ["cap"],
        registry=_registry,
    )

    _reconcile_ops_total = Counter(
        "runmark_reconcile_ops_total",
        "Operaciones de reconciliación del buffer de streaming",
        ["op"],
        registry=_registry,
    )

    _enhancement_failures_total = Counter(
        "runmark_enhancement_failures_total",
        "Fallas de colaboradores opcionales (presentación)",
        registry=_registry,
    )

    _pass_duration = Histogram(
        "runmark_pass_duration_seconds",
        "Duración de una pasada sobre un root (segundos)",
        ["pass_name"],
        buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
        registry=_registry,
    )


# Inicialización al importar el módulo
_init_metrics()


# -----------------------------------------------------------------------------
# API pública (helpers de registro)
# -----------------------------------------------------------------------------


def record_pass_run(pass_name: str, seconds: float | None = None) -> None:
    """Cuenta una pasada ejecutada (y su duración, si se midió)."""
    if _passes_run_total:
        _passes_run_total.labels(pass_name=pass_name).inc()
    if seconds is not None and _pass_duration:
        _pass_duration.labels(pass_name=pass_name).observe(seconds)


def record_pass_skipped(pass_name: str) -> None:
    if _passes_skipped_total:
        _passes_skipped_total.labels(pass_name=pass_name).inc()


def record_spans_emitted(pass_name: str, count: int) -> None:
    if count > 0 and _spans_emitted_total:
        _spans_emitted_total.labels(pass_name=pass_name).inc(count)


def record_cap_hit(cap: str) -> None:
    """cap ∈ {chars, fragments, spans, locale_wraps, stream_units}."""
    if _cap_hits_total:
        _cap_hits_total.labels(cap=cap).inc()


def record_reconcile_ops(*, inserted: int, updated: int, removed: int) -> None:
    if not _reconcile_ops_total:
        return
    for op, count in (
        ("inserted", inserted),
        ("updated", updated),
        ("removed", removed),
    ):
        if count > 0:
            _reconcile_ops_total.labels(op=op).inc(count)


def record_enhancement_failure() -> None:
    if _enhancement_failures_total:
        _enhancement_failures_total.inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Devuelve (payload, content_type) para exponer en el host."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST


def get_registry() -> CollectorRegistry:
    return _registry
