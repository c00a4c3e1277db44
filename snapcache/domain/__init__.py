"""Domain Layer: value objects, error taxonomy and abstract interfaces.

Has no dependencies on the infrastructure or core layers.
"""
