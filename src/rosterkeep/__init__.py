"""Roster, song assignment and notification tooling for a volunteer worship team."""
