"""Routing: path templates, the route table, and the dispatcher.

Routes are registered during setup, scanned in registration order, and
frozen on the first dispatch.
"""
