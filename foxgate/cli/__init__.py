"""CLI module for foxgate."""
