# runmark/crosscutting/logger.py
"""
===============================================================================
MÓDULO: Logging del motor (una línea JSON por evento)
===============================================================================

Responsabilidades:
  - Emitir cada evento como JSON de una línea: evento, nivel y el contexto de
    la pasada (root_id / pass_name / tick_id) primero; los campos `extra`
    después.
  - Recortar textos largos en los extras (pueden llevar contenido de
    fragmentos).
  - Configurar el logger "runmark" una sola vez a partir de Settings.

Colaboradores:
  - crosscutting/context.get_context_dict
  - crosscutting/config.get_settings (log_level / log_json)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .context import get_context_dict

MAX_FIELD_CHARS = 2_000
_HANDLER_NAME = "runmark"

# Atributos que trae todo LogRecord; el resto llegó por `extra`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
        return f"{value[:MAX_FIELD_CHARS]}…(+{len(value) - MAX_FIELD_CHARS})"
    if isinstance(value, dict):
        return {str(k): _clip(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_clip(v) for v in value]
    return value


class JSONFormatter(logging.Formatter):
    """LogRecord -> {"ts", "level", "event", contexto de pasada, extras}."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            **get_context_dict(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = _clip(value)

        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = {
                "type": record.exc_info[0].__name__,
                "detail": str(record.exc_info[1]),
                "trace": self.formatException(record.exc_info),
            }
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(
    name: str = "runmark",
    *,
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
) -> logging.Logger:
    """
    Configura el logger del paquete; llamadas repetidas reemplazan nivel y
    formato sin duplicar handlers. Sin argumentos usa log_level / log_json.
    """
    if level is None or use_json is None:
        try:
            from .config import get_settings

            s = get_settings()
            level = level or s.log_level
            use_json = s.log_json if use_json is None else use_json
        except ValueError:
            # Settings inválidas no impiden loguear.
            level = level or "INFO"
            use_json = True if use_json is None else use_json

    log = logging.getLogger(name)
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handler = next((h for h in log.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        log.addHandler(handler)
    handler.setFormatter(
        JSONFormatter() if use_json else logging.Formatter("%(levelname)s %(name)s %(message)s")
    )
    return log


logger = setup_logger()
