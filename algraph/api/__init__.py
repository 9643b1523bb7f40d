"""
HTTP surface and serialization models for AL Graph.
"""
