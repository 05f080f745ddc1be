"""
Use Cases Layer (Annotation Passes)

This package exposes one entry point per pass, in the order the engine runs
them inside a root.

Structure
---------
usecases/
├── apply_quotes.py        # <q> wrapping + custom/dialogue/plain labels
├── typewriter_pass.py     # per-grapheme units (non-streaming roots)
├── apply_custom_font.py   # open/close delimiter ranges
├── apply_locale_fonts.py  # per-script runs
├── sync_stream_buffer.py  # buffered streaming + minimal-diff reconcile
└── pass_results.py        # shared result models

Usage
-----
    from runmark.application.usecases import ApplyCustomFontUseCase
"""

from .apply_custom_font import ApplyCustomFontUseCase
from .apply_locale_fonts import ApplyLocaleFontsUseCase
from .apply_quotes import ApplyQuotesUseCase
from .pass_results import PassResult, PassStatus
from .sync_stream_buffer import SyncStreamBufferUseCase, source_fingerprint
from .typewriter_pass import TypewriterPassResult, TypewriterPassUseCase

__all__ = [
    "ApplyQuotesUseCase",
    "TypewriterPassUseCase",
    "TypewriterPassResult",
    "ApplyCustomFontUseCase",
    "ApplyLocaleFontsUseCase",
    "SyncStreamBufferUseCase",
    "source_fingerprint",
    "PassResult",
    "PassStatus",
]
