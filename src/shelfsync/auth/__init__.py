"""Admin authentication.

Learn: The admin surface is guarded by a single shared token sent in the
X-Admin-Token header. Inventory routes are open on purpose: the
unguessable UUID in the URL is the only capability a user needs.
"""
