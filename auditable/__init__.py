"""
auditable: field-level change history for Django models.
"""

__version__ = "1.0.0"
