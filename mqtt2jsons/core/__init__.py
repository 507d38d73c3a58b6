"""Tipos de dominio y errores, sin dependencias de transporte."""
