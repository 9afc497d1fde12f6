"""
Features d'Observation Offload.
"""
