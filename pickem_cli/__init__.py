"""Command line interface for the pick'em sync and grading engine."""
