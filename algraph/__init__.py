"""
AL Graph package root.

Provides modules for intermediate representation (IR) modelling of Business
Central AL sources, the extraction and integration-resolution pipeline, graph
schema definitions, and the HTTP surface built on top of them.
"""

__all__ = ["ir", "pipeline", "graph", "config", "api"]
