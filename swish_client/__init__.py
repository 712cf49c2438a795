"""
Swish Client - Source Package

Client-side core for a phone-number based money transfer app.
Talks to a user service and a transaction service over HTTP and keeps
the local session, balance, history and contacts in step with them.

DESIGN PRINCIPLES:
1. The remote services are the source of truth
2. Never infer that money moved from anything but a transfer result
3. Failures are returned as results, not raised
4. Every session and transfer step is audited
5. Session storage is swappable
"""

__version__ = "1.0.0"
__author__ = "Swish Client Team"
