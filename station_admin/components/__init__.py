"""
Dashboard components
Each component is a blueprint (routes.py) backed by a service (service.py)
and registered on the app through its init_* function.
"""
