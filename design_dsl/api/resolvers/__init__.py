"""
Resolvers compute cross-unit facts from the registry: identities,
relationships, mixin applications and attached behaviors.
"""

from .identity import IdentityProperty, resolve_identity
from .relationships import (
    BELONGS_TO,
    HAS_MANY,
    HAS_ONE,
    REFERENCES,
    Relationship,
    IncomingForeignKey,
    resolve_relationships,
    resolve_incoming_foreign_keys,
)
from .behaviors import (
    Behavior,
    BehaviorParameter,
    LIFECYCLE_TYPES,
    resolve_behaviors,
    entity_behaviors,
    orphan_behaviors,
)
from .mixins import MixinApplication, resolve_mixins, merge_properties, effective_properties

__all__ = [
    "IdentityProperty",
    "resolve_identity",
    "BELONGS_TO",
    "HAS_MANY",
    "HAS_ONE",
    "REFERENCES",
    "Relationship",
    "IncomingForeignKey",
    "resolve_relationships",
    "resolve_incoming_foreign_keys",
    "Behavior",
    "BehaviorParameter",
    "LIFECYCLE_TYPES",
    "resolve_behaviors",
    "entity_behaviors",
    "orphan_behaviors",
    "MixinApplication",
    "resolve_mixins",
    "merge_properties",
    "effective_properties",
]
