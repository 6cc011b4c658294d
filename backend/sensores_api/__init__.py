"""
Sensores/Actuadores Backend
===========================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a record look like?)
- services/  = Workers (talk to MongoDB, broadcast changes)
- routers/   = API endpoints, HTTP and WebSocket (the doors into our app)
- utils/     = Small validation helpers
- main.py    = Puts it all together and starts the server
"""

__version__ = "1.0.0"
