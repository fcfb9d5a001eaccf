"""
Domain layer: value objects, entities, services and repository interfaces
"""
