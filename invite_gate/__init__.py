"""Invite-code gated sign-in service."""
