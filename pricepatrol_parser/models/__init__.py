"""Data models for pricepatrol_parser."""
