"""Tests for the skills subsystem: SKILL.md loading, validation, scaffolding and discovery."""
