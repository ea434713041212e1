"""
Shared Kernel Module
====================

Generic infrastructure shared across bounded contexts (logging, HTTP
middleware). Domain models live in their own modules.

DO NOT add SLA business logic to the shared kernel.
"""
