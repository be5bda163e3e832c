"""Renderers — platform Markdown, rich terminal, JSON."""
