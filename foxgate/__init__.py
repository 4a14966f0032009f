"""
foxgate - task queueing HTTP gateway for FoxControl devices
"""

__version__ = "0.1.0"
__logo__ = "🦊"
