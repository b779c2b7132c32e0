from __future__ import annotations

from typing import Any

from jinja2 import StrictUndefined
from jinja2.sandbox import ImmutableSandboxedEnvironment


PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ view.title }}</title>
</head>
<body>
<main class="crud-page" data-module="{{ view.module }}" data-state="{{ view.state }}">
  <header class="crud-header">
    <h1>{{ view.title }}</h1>
    <button type="button" class="crud-new">{{ view.new_label }}</button>
  </header>
  {% if view.error %}
  <div class="crud-error" role="alert" data-code="{{ view.error.code }}">{{ view.error.message }}</div>
  {% endif %}
  <div class="crud-toolbar">
    {% if view.search.enabled %}
    <input type="text" name="search" placeholder="{{ view.search.placeholder }}" value="{{ view.search.value }}">
    {% endif %}
    <p class="crud-count">{{ view.count_label }}</p>
  </div>
  {% if view.loading %}
  <div class="crud-loading" aria-busy="true"></div>
  {% else %}
  <table class="crud-table">
    <thead>
      <tr>
        {% for col in view.columns %}<th data-field="{{ col.name }}"{% if col.sorted %} aria-sort="{{ 'ascending' if col.sorted == 'asc' else 'descending' }}"{% endif %}>{{ col.label }}</th>{% endfor %}
        <th>Actions</th>
      </tr>
    </thead>
    <tbody>
      {% for row in view.rows %}
      <tr data-id="{{ row.id }}">
        {% for cell in row.cells %}<td data-field="{{ cell.name }}">{% if cell.css %}<span class="{{ cell.css }}">{{ cell.text }}</span>{% else %}{{ cell.text }}{% endif %}</td>{% endfor %}
        <td><button type="button" class="crud-delete" title="Delete">Delete</button></td>
      </tr>
      {% else %}
      <tr><td colspan="{{ view.columns | length + 1 }}" class="crud-empty">{{ view.empty_message or "" }}</td></tr>
      {% endfor %}
    </tbody>
  </table>
  {% endif %}
  {% if view.form %}
  <form class="crud-form" method="post">
    <h2>{{ view.form.title }}</h2>
    {% for field in view.form.fields %}
    <label class="span-{{ field.span }}">{{ field.label }}{% if field.required %} *{% endif %}
      {% if field.type == "textarea" %}
      <textarea name="{{ field.name }}"{% if field.required %} required{% endif %}>{{ field.value if field.value is not none else "" }}</textarea>
      {% elif field.type == "select" %}
      <select name="{{ field.name }}"{% if field.required %} required{% endif %}>
        <option value="">Select...</option>
        {% for opt in field.options %}<option value="{{ opt.value }}"{% if opt.value == field.value %} selected{% endif %}>{{ opt.label }}</option>{% endfor %}
      </select>
      {% elif field.type == "boolean" %}
      <input type="checkbox" name="{{ field.name }}"{% if field.value %} checked{% endif %}>
      {% else %}
      <input type="{{ input_types.get(field.type, 'text') }}" name="{{ field.name }}" value="{{ field.value if field.value is not none else '' }}"{% if field.placeholder %} placeholder="{{ field.placeholder }}"{% endif %}{% if field.required %} required{% endif %}>
      {% endif %}
      {% if field.error %}<span class="field-error">{{ field.error }}</span>{% endif %}
    </label>
    {% endfor %}
    <button type="button" class="crud-cancel">Cancel</button>
    <button type="submit"{% if view.form.submitting %} disabled{% endif %}>{{ view.form.submit_label }}</button>
  </form>
  {% endif %}
  {% if view.confirm_delete %}
  <div class="crud-confirm" role="dialog" data-id="{{ view.confirm_delete.record_id }}">
    <h2>{{ view.confirm_delete.title }}</h2>
    <p>{{ view.confirm_delete.message }}</p>
    <button type="button" class="crud-cancel">Cancel</button>
    <button type="button" class="crud-delete-confirm">Delete</button>
  </div>
  {% endif %}
</main>
</body>
</html>
"""

_INPUT_TYPES = {"number": "number", "currency": "number", "date": "date", "relation": "text", "text": "text"}

_ENV = ImmutableSandboxedEnvironment(autoescape=True, undefined=StrictUndefined, trim_blocks=True, lstrip_blocks=True)
_TEMPLATE = _ENV.from_string(PAGE_TEMPLATE)


def render_page(view: dict[str, Any]) -> str:
    return _TEMPLATE.render(view=view, input_types=_INPUT_TYPES)
