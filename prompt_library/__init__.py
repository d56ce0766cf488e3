"""Prompt Library API - a catalog of prompts with reviews, comments and usage stats."""
