"""Crosscutting: configuración, logging, errores, métricas y timing."""
