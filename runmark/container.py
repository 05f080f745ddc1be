"""
===============================================================================
TARJETA CRC — runmark/container.py (Composition Root + fachada del motor)
===============================================================================

Responsabilidades:
  - Componer dependencias (store de firmas, segmentadores, reloj, casos de uso)
    siguiendo DIP, a partir de Settings.
  - Exponer AnnotationEngine: registro de roots, eventos de ciclo de vida,
    ejecución de pasadas por root, streaming y conteos para timing encadenado.
  - Centralizar decisiones runtime basadas en Settings (qué pasadas corren).

Colaboradores:
  - runmark.crosscutting.config.get_settings
  - runmark.application.usecases.* (pasadas)
  - runmark.application.scheduler.ScanScheduler
  - runmark.infrastructure.* (cache, clock, host_feed, segmenters)

Patrones aplicados:
  - Composition Root
  - Facade (AnnotationEngine)

Notas:
  - Orden de pasadas dentro de un root: quotes -> typewriter -> custom -> locale.
  - Un fallo del PresentationBuilder (enhancement opcional) se loguea y se
    cuenta; nunca interrumpe las pasadas.
===============================================================================
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from .application.annotator import clear_markers
from .application.scheduler import ScanScheduler
from .application.signatures import SignatureCache
from .application.typewriter import chained_start_offsets
from .application.usecases import (
    ApplyCustomFontUseCase,
    ApplyLocaleFontsUseCase,
    ApplyQuotesUseCase,
    PassResult,
    PassStatus,
    SyncStreamBufferUseCase,
    TypewriterPassUseCase,
)
from .crosscutting.config import Settings, get_settings
from .crosscutting.exceptions import ConfigurationError, PresentationError
from .crosscutting.logger import logger
from .crosscutting.metrics import (
    record_enhancement_failure,
    record_pass_run,
    record_pass_skipped,
    record_spans_emitted,
)
from .crosscutting.timing import PassTimings
from .domain.entities import Document, Element
from .domain.services import FrameClockPort, PresentationBuilderPort, SignatureStorePort
from .domain.value_objects import (
    CUSTOM_OWNER,
    LOCALE_OWNER,
    QUOTE_CLOSE_INDEX_ATTR,
    QUOTE_LABEL_OWNER,
    QUOTE_OPEN_INDEX_ATTR,
    QUOTE_OWNER,
    SOURCE_SIG_ATTR,
    STREAM_ANIM_ATTR,
    STREAM_BUFFER_ATTR,
    STREAM_CURSOR_ATTR,
    STREAM_MODE_ATTR,
    STREAM_ROOT_ATTRS,
    STREAM_STEP_ATTR,
    TYPEWRITER_COUNT_ATTR,
    TYPEWRITER_START_ATTR,
    UNIT_OWNER,
    LifecycleEvent,
    LifecycleEventType,
    StreamSyncResult,
)
from .infrastructure.cache import InMemorySignatureStore
from .infrastructure.clock import ManualFrameClock
from .infrastructure.host_feed import DocumentChangeFeed
from .infrastructure.text import build_segmenter


@dataclass
class RootEntry:
    root_id: str
    root: Element
    streaming: bool = False
    buffer: Optional[Element] = None
    emitted_units: int = 0


@dataclass(frozen=True)
class RootReport:
    root_id: str
    passes: tuple[PassResult, ...] = ()
    emitted_units: int = 0
    stream: Optional[StreamSyncResult] = None
    timings: dict[str, float] = field(default_factory=dict)

    def result(self, pass_name: str) -> Optional[PassResult]:
        for item in self.passes:
            if item.pass_name == pass_name:
                return item
        return None


class AnnotationEngine:
    """
    Fachada del motor: un Document, N roots registrados por id estable.

    El host registra roots, emite eventos de ciclo de vida y avanza el reloj;
    el motor coalesce pedidos y corre las pasadas una vez por frame.
    """

    def __init__(
        self,
        document: Document,
        *,
        settings: Optional[Settings] = None,
        clock: Optional[FrameClockPort] = None,
        store: Optional[SignatureStorePort] = None,
        presentation: Optional[PresentationBuilderPort] = None,
    ) -> None:
        self._document = document
        self._clock = clock or ManualFrameClock()
        self._signatures = SignatureCache(store or InMemorySignatureStore())
        self._presentation = presentation

        self._roots: dict[str, RootEntry] = {}
        self._root_nodes: dict[int, str] = {}
        self._streaming_root: Optional[str] = None

        self._scheduler = ScanScheduler(
            self._clock,
            run_full=self.process_all,
            run_targeted=self.process_roots,
            is_attached=self.is_attached,
            before_flush=self._sync_streaming_state,
        )
        self._feed = DocumentChangeFeed(document, self._root_nodes, self._scheduler.notify)

        self.configure(settings or get_settings(), rescan=False)
        self._feed.start()

    # =========================================================================
    # Configuración
    # =========================================================================
    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def scheduler(self) -> ScanScheduler:
        return self._scheduler

    @property
    def clock(self) -> FrameClockPort:
        return self._clock

    def configure(self, settings: Settings, *, rescan: bool = True) -> None:
        """Recompone casos de uso con nuevos Settings y pide un rescan completo."""
        if not isinstance(settings, Settings):
            raise ConfigurationError(f"expected Settings, got {type(settings).__name__}")
        self._settings = settings
        s = settings

        grapheme = build_segmenter("grapheme", clusters_available=s.grapheme_segmentation)
        word = build_segmenter("word")

        self._quotes = ApplyQuotesUseCase(
            self._signatures, max_chars=s.max_text_chars, max_fragments=s.max_fragments
        )
        self._typewriter = TypewriterPassUseCase(grapheme, step_ms=s.typewriter_step_ms)
        self._custom = ApplyCustomFontUseCase(
            self._signatures,
            max_spans=s.max_delimiter_spans,
            max_chars=s.max_text_chars,
            max_fragments=s.max_fragments,
        )
        self._locale = ApplyLocaleFontsUseCase(
            self._signatures,
            grapheme,
            max_wraps=s.max_locale_wraps,
            max_chars=s.max_text_chars,
            max_fragments=s.max_fragments,
        )
        self._stream = SyncStreamBufferUseCase(
            {"grapheme": grapheme, "word": word},
            lambda target: self._annotate(target, root_id=None, typewriter=False),
            max_units=s.max_stream_units,
        )

        for entry in self._roots.values():
            if entry.buffer is not None:
                entry.buffer.remove(SOURCE_SIG_ATTR)

        self.refresh_presentation()
        if rescan:
            self._scheduler.schedule(full=True)

    def refresh_presentation(self) -> bool:
        """
        Reconstruye la presentación (ej. CSS de fuentes) vía el builder
        opcional. Devuelve False si no hay builder o si falló.
        """
        if self._presentation is None:
            return False
        s = self._settings
        fonts: dict[str, str] = {}
        if s.fonts_enabled:
            if s.dialogue_font.strip():
                fonts["dialogue"] = s.dialogue_font.strip()
            if s.custom_font.strip():
                fonts["custom"] = s.custom_font.strip()
            fonts.update({f"locale:{k}": v for k, v in s.active_locale_fonts().items()})
        try:
            self._presentation.build(fonts)
        except Exception as exc:
            error = PresentationError("presentation build failed", original_error=exc)
            logger.exception(
                error.message,
                extra={"error_code": error.error_code, "error_id": error.error_id},
            )
            record_enhancement_failure()
            return False
        return True

    # =========================================================================
    # Registro de roots
    # =========================================================================
    def register_root(self, root_id: str, root: Element, *, streaming: bool = False) -> None:
        if not root_id:
            raise ConfigurationError("root_id must be a non-empty string")
        if root.document is not self._document:
            raise ConfigurationError(f"root {root_id!r} belongs to another document")

        previous = self._roots.get(root_id)
        if previous is not None and previous.root is not root:
            self.teardown(root_id)

        self._roots[root_id] = RootEntry(root_id=root_id, root=root)
        self._root_nodes[root.id] = root_id
        if streaming:
            self.start_stream(root_id)
        self._scheduler.schedule(full=False, roots=[root_id])

    def teardown(self, root_id: str) -> None:
        entry = self._roots.pop(root_id, None)
        if entry is None:
            return
        self._root_nodes.pop(entry.root.id, None)
        if self._streaming_root == root_id:
            self._streaming_root = None
        self._remove_buffer(entry)
        self._clear_stream_attrs(entry)
        evicted = self._signatures.evict(root_id)
        logger.debug("root torn down", extra={"root": root_id, "evicted": evicted})

    def is_attached(self, root_id: str) -> bool:
        return root_id in self._roots

    @property
    def root_ids(self) -> list[str]:
        return list(self._roots)

    def stream_buffer(self, root_id: str) -> Optional[Element]:
        entry = self._roots.get(root_id)
        return entry.buffer if entry else None

    # =========================================================================
    # Eventos / streaming
    # =========================================================================
    def handle_event(self, event: LifecycleEvent) -> None:
        kind = event.type
        if kind in (LifecycleEventType.CONTENT_CHANGED, LifecycleEventType.TOKEN_RECEIVED):
            root_id = event.root_id
            if kind is LifecycleEventType.TOKEN_RECEIVED and not root_id:
                root_id = self._streaming_root
            if root_id and self.is_attached(root_id):
                self._scheduler.schedule(full=False, roots=[root_id])
            return
        if kind is LifecycleEventType.GENERATION_STARTED:
            if event.root_id and self.is_attached(event.root_id):
                self.start_stream(event.root_id)
            self._scheduler.schedule(full=False)
            return
        if kind in (LifecycleEventType.GENERATION_STOPPED, LifecycleEventType.GENERATION_ENDED):
            self.end_stream()
            self._scheduler.schedule(full=True)

    def start_stream(self, root_id: str) -> None:
        """Marca `root_id` como el root en streaming (uno a la vez)."""
        if root_id not in self._roots:
            raise ConfigurationError(f"unknown root: {root_id!r}")
        if self._streaming_root and self._streaming_root != root_id:
            self.end_stream()
        self._streaming_root = root_id
        self._roots[root_id].streaming = True
        self._scheduler.schedule(full=False, roots=[root_id])

    def end_stream(self) -> None:
        root_id = self._streaming_root
        self._streaming_root = None
        if root_id is None:
            return
        entry = self._roots.get(root_id)
        if entry is None:
            return
        entry.streaming = False
        self._remove_buffer(entry)
        self._clear_stream_attrs(entry)
        self._scheduler.schedule(full=False, roots=[root_id])

    @property
    def streaming_root(self) -> Optional[str]:
        return self._streaming_root

    # =========================================================================
    # Conteos / timing encadenado
    # =========================================================================
    def emitted_unit_count(self, root_id: str) -> int:
        entry = self._roots.get(root_id)
        return entry.emitted_units if entry else 0

    def chained_start_offsets(self, root_ids: Iterable[str]) -> dict[str, int]:
        ids = list(root_ids)
        offsets = chained_start_offsets(
            [self.emitted_unit_count(root_id) for root_id in ids],
            self._settings.typewriter_step_ms,
        )
        return dict(zip(ids, offsets))

    # =========================================================================
    # Ejecución de pasadas
    # =========================================================================
    def process_all(self) -> list[RootReport]:
        return [self.process_root(root_id) for root_id in list(self._roots)]

    def process_roots(self, root_ids: Iterable[str]) -> list[RootReport]:
        return [
            self.process_root(root_id) for root_id in root_ids if self.is_attached(root_id)
        ]

    def process_root(self, root_id: str) -> RootReport:
        entry = self._roots.get(root_id)
        if entry is None:
            raise ConfigurationError(f"unknown root: {root_id!r}")

        timings = PassTimings(root_id)
        s = self._settings

        if entry.streaming and s.stream_render_mode == "buffered":
            stream = self._process_buffered(entry, timings)
            entry.emitted_units = stream.total_units
            report = RootReport(
                root_id=root_id,
                emitted_units=stream.total_units,
                stream=stream,
                timings=timings.to_dict(),
            )
        else:
            passes, emitted = self._annotate(
                entry.root,
                root_id=root_id,
                typewriter=not entry.streaming,
                timings=timings,
            )
            entry.emitted_units = emitted
            report = RootReport(
                root_id=root_id,
                passes=passes,
                emitted_units=emitted,
                timings=timings.to_dict(),
            )

        logger.debug(
            "root processed",
            extra={"root": root_id, "emitted_units": report.emitted_units, **report.timings},
        )
        return report

    def clear_root(self, root_id: str) -> None:
        """
        Quita todos los marcadores del motor bajo el root y olvida sus firmas.
        Las mutaciones de la limpieza no re-disparan el scheduler.
        """
        entry = self._roots.get(root_id)
        if entry is None:
            return
        with self._feed_paused():
            root = entry.root
            for owner in (LOCALE_OWNER, CUSTOM_OWNER, QUOTE_LABEL_OWNER, UNIT_OWNER, QUOTE_OWNER):
                clear_markers(root, owner)
            for el in [root, *root.find_all(lambda _el: True)]:
                for attr in (
                    TYPEWRITER_COUNT_ATTR,
                    TYPEWRITER_START_ATTR,
                    QUOTE_OPEN_INDEX_ATTR,
                    QUOTE_CLOSE_INDEX_ATTR,
                ):
                    el.remove(attr)
        entry.emitted_units = 0
        self._signatures.evict(root_id)

    def run_until_idle(self, max_ticks: int = 100) -> int:
        """Avanza un ManualFrameClock hasta que no quede trabajo."""
        if not isinstance(self._clock, ManualFrameClock):
            raise ConfigurationError("run_until_idle requires a ManualFrameClock")
        return self._clock.run_until_idle(max_ticks)

    # =========================================================================
    # Internos
    # =========================================================================
    def _annotate(
        self,
        root: Element,
        *,
        root_id: Optional[str],
        typewriter: bool,
        timings: Optional[PassTimings] = None,
    ) -> tuple[tuple[PassResult, ...], int]:
        s = self._settings
        timings = timings or PassTimings(root_id or "")
        custom_pair = s.custom_tokens() if s.delimiter_pass_active() else None
        results: list[PassResult] = []
        emitted = 0

        with timings.measure("quotes"):
            result = self._quotes.execute(
                root,
                enabled=s.quote_pass_active(),
                custom_pair=custom_pair,
                root_id=root_id,
            )
        self._record(result, timings)
        results.append(result)

        if typewriter:
            with timings.measure("typewriter"):
                tw = self._typewriter.execute(root, enabled=s.fonts_enabled)
            if tw.status is PassStatus.APPLIED:
                record_pass_run("typewriter", timings.seconds("typewriter"))
                record_spans_emitted("typewriter", tw.emitted_units)
            emitted = tw.emitted_units

        open_token, close_token = s.custom_tokens()
        with timings.measure("custom"):
            result = self._custom.execute(
                root,
                open_token=open_token,
                close_token=close_token,
                enabled=s.delimiter_pass_active(),
                root_id=root_id,
            )
        self._record(result, timings)
        results.append(result)

        with timings.measure("locale"):
            result = self._locale.execute(root, fonts=s.active_locale_fonts(), root_id=root_id)
        self._record(result, timings)
        results.append(result)

        return tuple(results), emitted

    def _process_buffered(self, entry: RootEntry, timings: PassTimings) -> StreamSyncResult:
        buffer = self._ensure_buffer(entry)
        s = self._settings
        granularity = None if s.stream_anim_effect == "none" else s.stream_granularity()
        with timings.measure("stream"):
            result = self._stream.execute(entry.root, buffer, granularity=granularity)
        if result.skipped:
            record_pass_skipped("stream")
        else:
            record_pass_run("stream", timings.seconds("stream"))
            record_spans_emitted("stream", result.new_units)
        return result

    def _ensure_buffer(self, entry: RootEntry) -> Element:
        if entry.buffer is not None:
            return entry.buffer
        source = entry.root
        buffer = self._document.element(source.tag, {STREAM_BUFFER_ATTR: "1"})
        if source.parent is not None:
            source.parent.insert(source.index_in_parent() + 1, buffer)
        entry.buffer = buffer
        return buffer

    def _remove_buffer(self, entry: RootEntry) -> None:
        buffer = entry.buffer
        entry.buffer = None
        if buffer is not None and buffer.parent is not None:
            buffer.parent.remove_child(buffer)

    def _sync_streaming_state(self) -> None:
        """
        Antes de cada flush: descartar buffers de roots que ya no los usan y
        escribir modo/efecto/cursor/paso sobre el root en streaming.
        """
        s = self._settings
        buffered = s.stream_render_mode == "buffered"
        for entry in self._roots.values():
            if entry.buffer is not None and not (entry.streaming and buffered):
                self._remove_buffer(entry)
            if not entry.streaming:
                self._clear_stream_attrs(entry)
                continue

            root = entry.root
            root.set(STREAM_MODE_ATTR, s.stream_render_mode)
            if not buffered:
                for attr in (STREAM_ANIM_ATTR, STREAM_CURSOR_ATTR, STREAM_STEP_ATTR):
                    root.remove(attr)
                continue
            if s.stream_anim_effect != "none":
                root.set(STREAM_ANIM_ATTR, s.stream_anim_effect)
            else:
                root.remove(STREAM_ANIM_ATTR)
            if s.stream_cursor_enabled():
                root.set(STREAM_CURSOR_ATTR, "1")
            else:
                root.remove(STREAM_CURSOR_ATTR)
            root.set(STREAM_STEP_ATTR, f"{s.stream_anim_speed}ms")

    @staticmethod
    def _clear_stream_attrs(entry: RootEntry) -> None:
        for attr in STREAM_ROOT_ATTRS:
            entry.root.remove(attr)

    @staticmethod
    def _record(result: PassResult, timings: PassTimings) -> None:
        if result.status is PassStatus.SKIPPED:
            record_pass_skipped(result.pass_name)
            return
        if result.status is PassStatus.APPLIED:
            record_pass_run(result.pass_name, timings.seconds(result.pass_name))
            record_spans_emitted(result.pass_name, result.spans)

    @contextmanager
    def _feed_paused(self) -> Iterator[None]:
        was_active = self._feed.active
        self._feed.stop()
        try:
            yield
        finally:
            if was_active:
                self._feed.start()


def build_engine(
    document: Document,
    *,
    settings: Optional[Settings] = None,
    clock: Optional[FrameClockPort] = None,
    presentation: Optional[PresentationBuilderPort] = None,
) -> AnnotationEngine:
    """Factory con defaults de producción (Settings desde entorno)."""
    return AnnotationEngine(
        document,
        settings=settings or get_settings(),
        clock=clock,
        presentation=presentation,
    )
