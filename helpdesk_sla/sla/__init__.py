"""
SLA Module
==========

Bounded Context for Service Level Agreement computation.

Responsibilities:
- Count business time between instants and project deadlines
- Reconstruct status periods from a ticket's history
- Compute response and resolution SLA clocks, including pauses
- Resolve the SLA target from custom, department, company and global layers
- Expose SLA status over HTTP for the ticket list and detail views
"""

__version__ = "1.0.0"
