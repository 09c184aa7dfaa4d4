"""
Host health monitor (hostmon).

Periodically checks critical services, disk and memory usage, restarts
failed services once per cycle, and sends alerts to chat and email.
"""

__version__ = "0.1.0"
