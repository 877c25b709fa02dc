"""Resolved-member registry for one initialization cycle.

ReflectionCache resolves every schema field against the live objects bound
in the current cycle, once, and serves O(1) lookups for reads and writes
until it is cleared. A field that cannot be resolved is recorded as
missing for the rest of the cycle; it never fails the build as a whole.

Composite channels (e.g. the light colour's r/g/b/a) are not members of
their own and are recorded as special rather than resolved.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from ..constants import NOT_FOUND
from ..parameters.coercion import to_generic
from ..parameters.schema import ParameterSchema
from ..parameters.types import GenericValue
from .members import MemberResolver, ResolvedMember, read_member

logger = logging.getLogger(__name__)

Key = Tuple[str, str]


@dataclass(frozen=True)
class ComponentBinding:
    """A logical component paired with the live object located for it.

    Lives for one initialization cycle.
    """
    name: str
    target: Any
    source: str = ""


class ReflectionCache:
    """Registry of ResolvedMembers keyed by (component, field)."""

    def __init__(self, resolver: Optional[MemberResolver] = None):
        self.resolver = resolver or MemberResolver()
        self._members: Dict[Key, ResolvedMember] = {}
        self._missing: Dict[str, Dict[str, str]] = {}
        self._special: set = set()
        self._built = False

    def build(self, schema: ParameterSchema, bindings: Mapping[str, ComponentBinding]) -> Mapping[Key, ResolvedMember]:
        """Resolve every schema field on the bound objects.

        Args:
            schema: Components and fields of interest
            bindings: Live objects located for (a subset of) the components

        Returns:
            Read-only view of the resolved members
        """
        self.clear()
        for spec in schema.components:
            binding = bindings.get(spec.name)
            for field_name in spec.fields:
                if spec.is_channel(field_name):
                    self._special.add((spec.name, field_name))
                    continue
                if binding is None:
                    self._missing.setdefault(spec.name, {})[field_name] = f"component {NOT_FOUND}"
                    continue

                lookup = self.resolver.resolve(spec.name, field_name, binding.target)
                if lookup.found:
                    self._members[(spec.name, field_name)] = lookup.member
                else:
                    logger.warning(f"Could not find field or property '{field_name}' in {spec.name}")
                    self._missing.setdefault(spec.name, {})[field_name] = lookup.reason

        self._built = True
        logger.info(
            f"Reflection cache built: {len(self._members)} members, "
            f"{sum(len(v) for v in self._missing.values())} missing, {len(self._special)} special"
        )
        return MappingProxyType(self._members)

    def get(self, component: str, field_name: str) -> Optional[ResolvedMember]:
        return self._members.get((component, field_name))

    def is_special(self, component: str, field_name: str) -> bool:
        return (component, field_name) in self._special

    def missing(self) -> Dict[str, Dict[str, str]]:
        """component -> field -> reason for every unresolved field."""
        return {c: dict(fields) for c, fields in self._missing.items()}

    def read(self, binding: ComponentBinding, field_name: str) -> GenericValue:
        """Read one field through its cached member as a GenericValue.

        Returns:
            The value, or UNSUPPORTED when the member is missing, unreadable
            or the host raises while reading
        """
        member = self.get(binding.name, field_name)
        if member is None:
            reason = self._missing.get(binding.name, {}).get(field_name, NOT_FOUND)
            return GenericValue.unsupported(reason)
        if not member.readable:
            return GenericValue.unsupported("write-only")
        try:
            raw = read_member(binding.target, member)
        except Exception as e:
            return GenericValue.unsupported(f"Error reading '{field_name}': {e}")
        return to_generic(raw, member.native_type)

    def clear(self) -> None:
        self._members.clear()
        self._missing.clear()
        self._special.clear()
        self._built = False

    @property
    def is_built(self) -> bool:
        return self._built

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._members)

    def __contains__(self, key: Key) -> bool:
        return key in self._members
