"""Core building blocks of cospy."""
