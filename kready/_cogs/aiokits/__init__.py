"""
Asyncio-related utilities not bound to the control-plane API or its clients.
"""
