from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .registry import registry

# Ensure built-in rule sets are imported/registered when generating a catalog.
from . import rulesets as _builtin_rule_sets  # noqa: F401


class RuleSetCatalogEntry(BaseModel):
    rule_set_id: str
    name: str
    description: str = ""
    version: str
    rule_count: int
    categories: List[str] = Field(default_factory=list)
    rules: List[Dict[str, Any]] = Field(default_factory=list)


def build_catalog() -> List[RuleSetCatalogEntry]:
    entries: List[RuleSetCatalogEntry] = []
    for rule_set_id in registry.ids():
        rule_set = registry.get(rule_set_id)
        categories: List[str] = []
        for rule in rule_set.rules:
            if rule.category not in categories:
                categories.append(rule.category)
        entries.append(
            RuleSetCatalogEntry(
                rule_set_id=rule_set.id,
                name=rule_set.name,
                description=rule_set.description,
                version=rule_set.version,
                rule_count=len(rule_set.rules),
                categories=categories,
                rules=[rule.model_dump(mode="json", exclude_none=True) for rule in rule_set.rules],
            )
        )

    entries.sort(key=lambda e: e.rule_set_id)
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True, ensure_ascii=False)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise SystemExit(
            "PyYAML is required for YAML output. Install it in your backend venv (e.g., `uv add pyyaml`)."
        ) from exc

    return yaml.safe_dump(catalog, sort_keys=True, allow_unicode=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate a catalog of the built-in rule sets.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    catalog = [e.model_dump() for e in build_catalog()]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
