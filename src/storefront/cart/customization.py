"""Canonical form for cart line customizations.

A line's customization is part of its identity: two adds of the same product
merge only when their customizations are the same mapping. Comparison goes
through the canonical form (string keys and values, sorted keys), so
``{"size": "M", "color": "red"}`` and ``{"color": "red", "size": "M"}`` are
one line, and ``{"qty_pack": 2}`` equals ``{"qty_pack": "2"}``.
"""

import json

from protean.exceptions import ValidationError


def normalize(customization) -> dict:
    """Return the mapping with string keys and values."""
    if customization is None or customization == "":
        return {}
    if isinstance(customization, str):
        try:
            customization = json.loads(customization)
        except json.JSONDecodeError:
            raise ValidationError({"customization": ["Customization must be a JSON object"]}) from None
    if not isinstance(customization, dict):
        raise ValidationError({"customization": ["Customization must be a mapping of option to value"]})
    return {str(key): str(value) for key, value in customization.items()}


def encode(customization) -> str:
    """Serialize to the canonical JSON stored on cart and order lines."""
    return json.dumps(normalize(customization), sort_keys=True, separators=(",", ":"))


def decode(stored) -> dict:
    return normalize(stored)


def same_customization(left, right) -> bool:
    return normalize(left) == normalize(right)


def check_selection(available, selection, product_name="product") -> None:
    """Validate chosen values against a product's customization options.

    ``available`` is a list of ``{"name", "options", "required"}`` mappings.
    Unknown option names, values outside an option's list and missing
    required options are all reported together.
    """
    selection = normalize(selection)
    by_name = {option["name"]: option for option in available or []}
    errors = []
    for name, value in selection.items():
        option = by_name.get(name)
        if option is None:
            errors.append(f"'{name}' is not a customization option of {product_name}")
            continue
        allowed = [str(choice) for choice in option.get("options") or []]
        if allowed and value not in allowed:
            errors.append(f"'{value}' is not a valid choice for {name}")
    for name, option in by_name.items():
        if option.get("required") and name not in selection:
            errors.append(f"{name} is required")
    if errors:
        raise ValidationError({"customization": errors})
