"""
Helpdesk SLA Engine
===================

Business-hours SLA computation for helpdesk tickets.
"""

__version__ = "1.0.0"
