"""Conditional artifact rules: which files a module configuration implies."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Mapping, Tuple

from module_contracts.models import ConfigurationError, ModuleConfig

logger = logging.getLogger("module_contracts.rules")

Predicate = Callable[[ModuleConfig], bool]


def always(config: ModuleConfig) -> bool:
    return True


def flag_enabled(key: str) -> Predicate:
    """Predicate that holds iff ``field_values[key]`` is boolean True.

    Absent keys count as disabled.
    """

    def _predicate(config: ModuleConfig) -> bool:
        return config.flag(key)

    _predicate.__name__ = f"flag_enabled({key})"
    return _predicate


@dataclass(frozen=True)
class ArtifactRule:
    """A conditional artifact: *path_template* under *layer* when *predicate* holds."""

    name: str
    layer: str
    path_template: str
    predicate: Predicate = always

    def render(self, field_values: Mapping[str, object]) -> str:
        """Build the layer-relative artifact path from *field_values*."""
        try:
            relative = self.path_template.format_map(field_values)
        except KeyError as e:
            raise ConfigurationError(
                f"Rule {self.name!r} needs field {e.args[0]!r} to build "
                f"{self.path_template!r}"
            ) from e
        return f"{self.layer}/{relative}"


@dataclass(frozen=True)
class ModuleTypeRules:
    """Rule table and field vocabulary for one module type."""

    module_type: str
    known_fields: FrozenSet[str]
    rules: Tuple[ArtifactRule, ...]
    classify: Callable[[ModuleConfig], None]


# ---------------------------------------------------------------------------
# Database modules
# ---------------------------------------------------------------------------

DATABASE_TYPES: FrozenSet[str] = frozenset({"postgresql", "mysql", "mongodb"})

DATABASE_FIELDS: FrozenSet[str] = frozenset({
    "databaseType",
    "databaseName",
    "enableBackups",
    "enableReplication",
    "replicaCount",
    "enableSharding",
    "shardCount",
})


def _classify_database(config: ModuleConfig) -> None:
    database_type = config.field_values.get("databaseType")
    if database_type is None:
        raise ConfigurationError(
            f"Module {config.module_id!r}: 'databaseType' is required"
        )
    if not isinstance(database_type, str) or database_type not in DATABASE_TYPES:
        raise ConfigurationError(
            f"Module {config.module_id!r}: unknown databaseType "
            f"{database_type!r}. Known types: {sorted(DATABASE_TYPES)}"
        )


DATABASE_RULES: Tuple[ArtifactRule, ...] = (
    ArtifactRule("base-config", "ops", "database/{databaseType}-config.yaml"),
    ArtifactRule(
        "backup-policy", "ops", "database/backup-policy.yaml",
        flag_enabled("enableBackups"),
    ),
    # replicaCount/shardCount do not gate their files
    ArtifactRule(
        "replication-config", "ops", "database/replication-config.yaml",
        flag_enabled("enableReplication"),
    ),
    ArtifactRule(
        "sharding-config", "ops", "database/sharding-config.yaml",
        flag_enabled("enableSharding"),
    ),
)

_RULE_TABLES: Dict[str, ModuleTypeRules] = {
    "database": ModuleTypeRules(
        module_type="database",
        known_fields=DATABASE_FIELDS,
        rules=DATABASE_RULES,
        classify=_classify_database,
    ),
}


def known_module_types() -> List[str]:
    """List module types that have a rule table."""
    return sorted(_RULE_TABLES)


def rule_table(module_type: str) -> Tuple[ArtifactRule, ...]:
    """Return the declared rules for *module_type*.

    Raises:
        ConfigurationError: If no rule table exists for *module_type*.
    """
    return _lookup(module_type).rules


def _lookup(module_type: str) -> ModuleTypeRules:
    if module_type not in _RULE_TABLES:
        raise ConfigurationError(
            f"No artifact rules for module type {module_type!r}. "
            f"Known types: {known_module_types()}"
        )
    return _RULE_TABLES[module_type]


def derive_expected(config: ModuleConfig) -> FrozenSet[str]:
    """Derive the artifact set a configuration implies.

    Every rule is evaluated independently against ``config``; the result is
    a set, so neither rule order nor ``field_values`` order affects it.
    Disabled modules derive the empty set. Rules whose layer is not one of
    ``config.layers`` are skipped.

    Args:
        config: The module configuration.

    Returns:
        Frozenset of normalized, relative artifact paths.

    Raises:
        ConfigurationError: If the module type has no rule table or the
            configuration cannot be classified (e.g. unknown databaseType).
    """
    if not config.enabled:
        return frozenset()

    table = _lookup(config.type)
    table.classify(config)

    unknown = set(config.field_values) - table.known_fields
    if unknown:
        logger.debug(
            "Ignoring unknown %s fields for %s: %s",
            config.type, config.module_id, sorted(unknown),
        )

    return frozenset(
        rule.render(config.field_values)
        for rule in table.rules
        if rule.layer in config.layers and rule.predicate(config)
    )
