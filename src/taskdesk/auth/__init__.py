"""
Auth subsystem.

Components:
- session.py: SessionHolder (login/register/logout, current token)
- storage.py: FileTokenStorage (token persisted across restarts)
"""
