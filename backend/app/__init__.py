"""
Flow Readings Backend
=====================

This is the Python package for the backend API.

HOW IT'S ORGANIZED:
------------------
- models/    = Data structures (what does a reading look like?)
- services/  = Workers (store readings, compact, reconcile daily totals)
- routers/   = API endpoints (the doors into our app)
- config.py  = Settings read from the environment
- main.py    = Puts it all together and starts the server
"""
