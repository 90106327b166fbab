"""Command line interface for livevars."""
