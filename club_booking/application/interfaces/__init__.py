"""Puertos (interfaces) de la capa de aplicación."""
