"""
Use Cases

Organized into domain folders:
- invitations/: Invitation lifecycle
- access/: Gate authorization and access logs

Import from subdirectories.
"""
