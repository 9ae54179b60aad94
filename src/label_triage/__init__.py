"""
Label Triage
=============
Rule-based compliance triage for consumer product labels.

Checks text extracted from a label against the labeling rules of a
product category and market (Toys, Baby Products, Cosmetics in the
USA, UK and Germany) and produces a weighted score plus a prioritized
list of missing elements with remediation suggestions.
"""

__version__ = "0.1.0"
