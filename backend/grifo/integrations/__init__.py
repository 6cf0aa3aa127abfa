"""Integrações com serviços externos."""
