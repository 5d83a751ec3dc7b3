"""Bundled starter schemas."""

from .catalog import TemplateInfo, list_templates, load_template, template_keys

__all__ = ["TemplateInfo", "list_templates", "load_template", "template_keys"]
