"""dealdesk - talent and brand-deal CRM service with commission split allocation."""

__version__ = "1.0.0"
