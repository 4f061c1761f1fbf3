"""Credential services: bearer tokens handed out by the auth routes and
checked by the socket gateway."""
