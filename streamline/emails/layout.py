import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from streamline.config import settings

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

# .html templates are autoescaped, .txt templates are rendered as-is
env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(),
)


def render(template: str, **context) -> tuple[str, str]:
    """Render ``<template>.html`` and ``<template>.txt``. Returns (html, text)."""
    context.setdefault("app_name", settings.APP_NAME)
    html = env.get_template(f"{template}.html").render(**context)
    text = env.get_template(f"{template}.txt").render(**context)
    return html, text
