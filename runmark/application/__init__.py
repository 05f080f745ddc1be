"""
===============================================================================
TARJETA CRC — application/__init__.py
===============================================================================

Capa de aplicación: clasificadores puros (delimitadores, citas, locale),
TextView, Annotator, firmas, segmentación de streaming, reconciliación y
scheduler. Los casos de uso (pasadas) viven en `usecases/`.

Reglas:
    - Depende solo de domain y crosscutting; nunca de infrastructure.
===============================================================================
"""
