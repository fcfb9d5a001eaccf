"""
Infrastructure Layer

Configuration, logging, persistence, remote clients and wiring.
"""
