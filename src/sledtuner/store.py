"""ParameterStore: original/current snapshots bound to live host objects.

The store drives one initialization cycle (locate the vehicle, bind each
schema component, build the reflection cache, read every field) and keeps
two snapshots of the values it read:

- original: baseline captured at the last successful initialization
- current: the editable working set

Editors work on current through get/set; apply() pushes current into the
live objects and revert() pushes original. Nothing here raises for host
failures: missing components, missing members, rejected writes and
coercion failures are reported as data (InitializationOutcome, ApplyReport).

The store is not thread-safe. initialize(), apply() and revert() must be
called from the host's single update pass.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .binding.cache import ComponentBinding, ReflectionCache
from .binding.locator import ObjectLocator
from .binding.members import MemberResolver, write_member
from .constants import NOT_FOUND, ROOT_KEY, UNKNOWN_VEHICLE
from .errors import ErrorKind, Issue
from .host.base import HostGraph
from .parameters.coercion import coerce_channel, to_native
from .parameters.metadata import DEFAULT_METADATA, MetadataTable, slider_range
from .parameters.schema import DEFAULT_SCHEMA, ComponentSpec, ParameterSchema
from .parameters.types import GenericValue, NativeType
from .serialization import Snapshot, copy_snapshot, snapshot_from_plain

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class InitializationOutcome:
    """Result of one initialization attempt.

    Attributes:
        attempt: 1-based attempt number
        success: True when at least one component's fields were read
        errors: component (or the root key) -> failure reason
        field_errors: component -> field -> reason for unresolved members
        kinds: component (or the root key) -> failure classification
    """
    attempt: int
    success: bool
    errors: Mapping[str, str] = field(default_factory=dict)
    field_errors: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    kinds: Mapping[str, ErrorKind] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))
        object.__setattr__(self, "field_errors", MappingProxyType(
            {c: MappingProxyType(dict(f)) for c, f in self.field_errors.items()}))
        object.__setattr__(self, "kinds", MappingProxyType(dict(self.kinds)))

    def issues(self) -> List[Issue]:
        """Flatten component and field failures into Issues."""
        result = [
            Issue(name, "", self.kinds.get(name, ErrorKind.INTERNAL), reason)
            for name, reason in self.errors.items()
        ]
        for component, fields in self.field_errors.items():
            result.extend(
                Issue(component, name, ErrorKind.MEMBER_NOT_FOUND, reason)
                for name, reason in fields.items()
            )
        return result

    def summary(self) -> str:
        status = "succeeded" if self.success else "failed"
        if not self.errors:
            return f"Attempt {self.attempt} {status}"
        details = ", ".join(f"{k}: {v}" for k, v in self.errors.items())
        return f"Attempt {self.attempt} {status} ({details})"


@dataclass(frozen=True)
class ApplyReport:
    """Fields written to the host by apply()/revert() and the ones skipped."""
    applied: Tuple[Tuple[str, str], ...] = ()
    skipped: Tuple[Issue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.skipped

    def skipped_by_kind(self) -> Dict[ErrorKind, List[Issue]]:
        grouped: Dict[ErrorKind, List[Issue]] = {}
        for issue in self.skipped:
            grouped.setdefault(issue.kind, []).append(issue)
        return grouped


# Composite channels are plain floats on the host colour value
_CHANNEL_TYPE = NativeType.from_annotation(float)


class ParameterStore:
    """Snapshots of tunable parameters bound to the live vehicle.

    State machine: UNINITIALIZED -> INITIALIZING -> READY | FAILED, and
    back to UNINITIALIZED on reset(). apply() and revert() only touch the
    host in READY.
    """

    def __init__(
        self,
        graph: Optional[HostGraph] = None,
        schema: ParameterSchema = DEFAULT_SCHEMA,
        locator: Optional[ObjectLocator] = None,
        resolver: Optional[MemberResolver] = None,
        metadata: MetadataTable = DEFAULT_METADATA,
    ):
        """Create a store over a host graph.

        Args:
            graph: Host graph to search (ignored when locator is given)
            schema: Components and fields to expose
            locator: Custom ObjectLocator
            resolver: Custom MemberResolver (alternate names)
            metadata: Editor metadata table

        Raises:
            ValueError: If neither graph nor locator is provided
        """
        if locator is None:
            if graph is None:
                raise ValueError("ParameterStore needs a host graph or an ObjectLocator")
            locator = ObjectLocator(graph)
        self.locator = locator
        self.schema = schema
        self.resolver = resolver or MemberResolver()
        self.cache = ReflectionCache(self.resolver)
        self.metadata = metadata

        self.state = StoreState.UNINITIALIZED
        self.last_outcome: Optional[InitializationOutcome] = None
        self._bindings: Dict[str, ComponentBinding] = {}
        self._body: Any = None
        self._vehicle_name: Optional[str] = None
        self._original: Snapshot = {}
        self._current: Snapshot = {}

    # ---- lifecycle ---------------------------------------------------

    def initialize(self, attempt: int = 1) -> InitializationOutcome:
        """Locate components, build the cache and capture both snapshots.

        Any previous cycle is discarded first.

        Args:
            attempt: Attempt number recorded in the outcome

        Returns:
            InitializationOutcome; success when at least one field was read
        """
        self.reset()
        self.state = StoreState.INITIALIZING

        root = self.locator.locate_root()
        if not root.found:
            logger.warning(f"Initialization attempt {attempt}: {root.reason}")
            return self._finish(InitializationOutcome(
                attempt, False,
                errors={ROOT_KEY: root.reason},
                kinds={ROOT_KEY: ErrorKind.ROOT_NOT_FOUND},
            ))
        self._body = root.target
        logger.debug(f"Vehicle body located via {root.source}")

        errors: Dict[str, str] = {}
        kinds: Dict[str, ErrorKind] = {}
        for spec in self.schema.components:
            binding = self.locator.bind(self._body, spec.name)
            if binding is None:
                logger.warning(f"Component {spec.name} {NOT_FOUND}")
                errors[spec.name] = NOT_FOUND
                kinds[spec.name] = ErrorKind.SUBCOMPONENT_NOT_FOUND
                continue
            self._bindings[spec.name] = binding

        self.cache.build(self.schema, self._bindings)
        field_errors = {c: f for c, f in self.cache.missing().items() if c in self._bindings}

        snapshot: Snapshot = {}
        fields_read = 0
        for name, binding in self._bindings.items():
            spec = self.schema.get_component(name)
            values = {}
            for field_name in spec.fields:
                values[field_name] = self._read_field(binding, spec, field_name)
                if self.cache.get(name, field_name) is not None or (
                        self.cache.is_special(name, field_name) and values[field_name].is_supported):
                    fields_read += 1
            snapshot[name] = values

        success = fields_read > 0
        if success:
            self._original = snapshot
            self._current = copy_snapshot(snapshot)
            self._vehicle_name = self.locator.vehicle_name(self._body, self.resolver)
            logger.info(
                f"Initialized {len(self._bindings)}/{len(self.schema)} components, "
                f"{fields_read} fields for {self.vehicle_name()}"
            )
        else:
            errors.setdefault(ROOT_KEY, "no parameters could be read")
            kinds.setdefault(ROOT_KEY, ErrorKind.SUBCOMPONENT_NOT_FOUND)
            logger.warning(f"Initialization attempt {attempt}: no parameters could be read")

        return self._finish(InitializationOutcome(attempt, success, errors, field_errors, kinds))

    def _finish(self, outcome: InitializationOutcome) -> InitializationOutcome:
        if outcome.success:
            self.state = StoreState.READY
        else:
            self._bindings.clear()
            self.cache.clear()
            self._body = None
            self.state = StoreState.FAILED
        self.last_outcome = outcome
        return outcome

    def reset(self) -> None:
        """Drop bindings, cache and both snapshots. Idempotent."""
        self._bindings.clear()
        self.cache.clear()
        self._body = None
        self._vehicle_name = None
        self._original = {}
        self._current = {}
        self.last_outcome = None
        self.state = StoreState.UNINITIALIZED

    def record_failure(self, attempt: int, error: Exception) -> InitializationOutcome:
        """Drop everything and record an attempt that raised instead of finishing.

        The outcome carries kind INTERNAL under the root key with the
        exception type and message.
        """
        self.reset()
        outcome = InitializationOutcome(
            attempt, False,
            errors={ROOT_KEY: f"{type(error).__name__}: {error}"},
            kinds={ROOT_KEY: ErrorKind.INTERNAL},
        )
        return self._finish(outcome)

    @property
    def is_ready(self) -> bool:
        return self.state is StoreState.READY

    # ---- snapshot access ---------------------------------------------

    def get(self, component: str, field_name: str) -> GenericValue:
        """Current value of a field, Unsupported("not found") when absent."""
        value = self._current.get(component, {}).get(field_name)
        if value is None:
            return GenericValue.unsupported(NOT_FOUND)
        return value

    def set(self, component: str, field_name: str, value: Any) -> None:
        """Write a value into current only; the host is untouched.

        Works before initialization and for components that were not
        located.

        Raises:
            KeyError: If (component, field_name) is not in the schema
        """
        if (component, field_name) not in self.schema:
            raise KeyError(f"{component}.{field_name} is not a schema field")
        self._current.setdefault(component, {})[field_name] = GenericValue.of(value)

    @property
    def original(self) -> Snapshot:
        return copy_snapshot(self._original)

    @property
    def current(self) -> Snapshot:
        return copy_snapshot(self._current)

    def field_type(self, component: str, field_name: str) -> Optional[NativeType]:
        """Native type of a bound field, None when it is not bound."""
        member = self.cache.get(component, field_name)
        if member is not None:
            return member.native_type
        if component in self._bindings and self.schema.is_composite_channel(component, field_name):
            return _CHANNEL_TYPE
        return None

    def slider_range(self, component: str, field_name: str) -> Tuple[float, float]:
        return slider_range(self.metadata, component, field_name)

    def vehicle_name(self) -> str:
        return self._vehicle_name or UNKNOWN_VEHICLE

    def bound_components(self) -> List[str]:
        return list(self._bindings)

    # ---- host writes -------------------------------------------------

    def apply(self) -> ApplyReport:
        """Push current into the live objects, then refresh what was written."""
        return self._push(self._current, "apply", refresh=True)

    def revert(self) -> ApplyReport:
        """Push original into the live objects.

        current is left as is; callers that want their editors to show the
        reverted values should reload them from original.
        """
        return self._push(self._original, "revert", refresh=False)

    def load_snapshot(self, data: Mapping[str, Mapping[str, Any]]) -> ApplyReport:
        """Load plain or GenericValue data into current and apply it.

        Fields the schema does not declare are dropped. Loaded values
        replace the matching entries of current; others are kept.
        """
        loaded = snapshot_from_plain(data, self.schema)
        for component, fields in loaded.items():
            self._current.setdefault(component, {}).update(fields)
        logger.info(f"Loaded {sum(len(f) for f in loaded.values())} values into current")
        return self.apply()

    def _push(self, snapshot: Snapshot, label: str, refresh: bool) -> ApplyReport:
        if self.state is not StoreState.READY:
            logger.warning(f"Cannot {label}: store is {self.state.value}")
            return ApplyReport()

        applied: List[Tuple[str, str]] = []
        skipped: List[Issue] = []
        for component, fields in snapshot.items():
            binding = self._bindings.get(component)
            if binding is None:
                skipped.extend(
                    Issue(component, name, ErrorKind.SUBCOMPONENT_NOT_FOUND, NOT_FOUND) for name in fields
                )
                continue

            spec = self.schema.get_component(component)
            channels = {}
            for name, value in fields.items():
                if self.cache.is_special(component, name):
                    channels[name] = value
                    continue
                issue = self._write_field(binding, name, value)
                if issue is None:
                    applied.append((component, name))
                else:
                    skipped.append(issue)

            if channels:
                written, issues = self._write_composite(binding, spec, channels)
                applied.extend((component, name) for name in written)
                skipped.extend(issues)

        if refresh:
            for component, name in applied:
                spec = self.schema.get_component(component)
                self._current[component][name] = self._read_field(self._bindings[component], spec, name)

        for issue in skipped:
            if issue.kind in (ErrorKind.WRITE_REJECTED, ErrorKind.TYPE_COERCION_FAILURE):
                logger.warning(f"Skipped {issue}")
            else:
                logger.debug(f"Skipped {issue}")
        logger.info(f"{label.capitalize()}: {len(applied)} fields written, {len(skipped)} skipped")
        return ApplyReport(tuple(applied), tuple(skipped))

    def _write_field(self, binding: ComponentBinding, field_name: str, value: GenericValue) -> Optional[Issue]:
        member = self.cache.get(binding.name, field_name)
        if member is None:
            reason = self.cache.missing().get(binding.name, {}).get(field_name, NOT_FOUND)
            return Issue(binding.name, field_name, ErrorKind.MEMBER_NOT_FOUND, reason)
        if not member.writable:
            return Issue(binding.name, field_name, ErrorKind.WRITE_REJECTED, f"read-only {member.native_type}")

        coerced = to_native(value, member.native_type)
        if not coerced.ok:
            return Issue(binding.name, field_name, ErrorKind.TYPE_COERCION_FAILURE, coerced.reason)

        try:
            write_member(binding.target, member, coerced.value)
        except Exception as e:
            logger.error(f"Error writing {binding.name}.{field_name}: {e}")
            return Issue(binding.name, field_name, ErrorKind.WRITE_REJECTED, str(e))
        return None

    def _write_composite(
        self,
        binding: ComponentBinding,
        spec: ComponentSpec,
        channels: Mapping[str, GenericValue],
    ) -> Tuple[List[str], List[Issue]]:
        """Read-modify-write the composite value so its channels stay consistent."""
        composite = spec.composite
        issues: List[Issue] = []
        try:
            value = copy.copy(getattr(binding.target, composite.attribute))
        except Exception as e:
            reason = f"Error reading '{composite.attribute}': {e}"
            return [], [Issue(spec.name, name, ErrorKind.MEMBER_NOT_FOUND, reason) for name in channels]

        written = []
        for name, generic in channels.items():
            coerced = coerce_channel(generic, composite.lower, composite.upper)
            if not coerced.ok:
                issues.append(Issue(spec.name, name, ErrorKind.TYPE_COERCION_FAILURE, coerced.reason))
                continue
            try:
                setattr(value, name, coerced.value)
            except (AttributeError, TypeError) as e:
                issues.append(Issue(spec.name, name, ErrorKind.WRITE_REJECTED, str(e)))
                continue
            written.append(name)

        if not written:
            return [], issues
        try:
            setattr(binding.target, composite.attribute, value)
        except Exception as e:
            logger.error(f"Error writing {spec.name}.{composite.attribute}: {e}")
            issues.extend(Issue(spec.name, name, ErrorKind.WRITE_REJECTED, str(e)) for name in written)
            return [], issues
        return written, issues

    # ---- host reads --------------------------------------------------

    def _read_field(self, binding: ComponentBinding, spec: ComponentSpec, field_name: str) -> GenericValue:
        if not self.cache.is_special(binding.name, field_name):
            return self.cache.read(binding, field_name)
        try:
            raw = getattr(getattr(binding.target, spec.composite.attribute), field_name)
        except Exception as e:
            return GenericValue.unsupported(f"Error reading '{field_name}': {e}")
        return GenericValue.of(raw)
