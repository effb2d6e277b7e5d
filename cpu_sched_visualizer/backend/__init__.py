"""
Simulation backend: engine, policies, statistics and playback.
"""
